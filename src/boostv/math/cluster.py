"""Numba JIT compiled implementation of sequential recombination clustering.

The clustering history is stored in a flat arena: node `i < N` is the i-th
input four-momentum (leaf), every subsequent node is the E-scheme sum of the
two nodes referenced by its `parents` row. Leaves have `parents == (-1, -1)`.

The distance between two nodes follows the generalized-kt family:

.. math::

    d_{ij} = \\min(p_{T,i}^{2p}, p_{T,j}^{2p}) \\Delta R_{ij}^2,
    \\qquad d_{iB} = p_{T,i}^{2p} R^2

with `p = 0` for Cambridge/Aachen, `p = 1` for kt and `p = -1` for anti-kt.
For C/A, comparing `d_ij` to `d_iB` is the same as comparing `DeltaR_ij^2 / R^2`
to 1.

A pair further apart than R can never have the smallest distance, since one
of its two beam distances is smaller. Nearest neighbours are therefore only
searched for within R, among the nodes of the adjacent cells of an (eta, phi)
grid of cells at least R wide.
"""

import numba as nb
import numpy as np

from .base import eta, phi, pt2
from .distance import delta_r2

__all__ = ["ALGORITHMS", "recombine", "leaves", "assign_leaves"]

# Exponent of the transverse momentum weight for each supported algorithm
ALGORITHMS = {
    "cambridge": 0.0,
    "kt": 1.0,
    "antikt": -1.0,
}

# Extent of the tiled pseudorapidity band, nodes beyond sit in the edge tiles
TILE_ETA_MAX = 10.0


@nb.njit(cache=True)
def _weight(ptsq: nb.float64, p: nb.float64) -> nb.float64:
    if p == 0.0:
        return 1.0
    if ptsq == 0.0:
        if p < 0.0:
            return np.inf
        return 0.0

    return ptsq**p


@nb.njit(cache=True)
def _tile_index(
    eta_val: nb.float64,
    phi_val: nb.float64,
    eta_min: nb.float64,
    tile_eta: nb.float64,
    num_eta: nb.int64,
    num_phi: nb.int64,
) -> nb.int64:
    ieta, iphi = 0, 0
    if num_eta > 1:
        ieta = int(np.floor((eta_val - eta_min) / tile_eta))
        ieta = min(max(ieta, 0), num_eta - 1)
    if num_phi > 1:
        iphi = int(np.floor((phi_val + np.pi) * num_phi / (2.0 * np.pi)))
        iphi = min(max(iphi, 0), num_phi - 1)

    return ieta * num_phi + iphi


@nb.njit(cache=True)
def _adjacent_tiles(
    tile: nb.int64, num_eta: nb.int64, num_phi: nb.int64, out: nb.int64[:]
) -> nb.int64:
    # The grid wraps around in phi, it has either 1 or at least 3 phi columns
    ieta, iphi = tile // num_phi, tile % num_phi
    count = 0
    for e in range(max(ieta - 1, 0), min(ieta + 2, num_eta)):
        if num_phi == 1:
            out[count] = e
            count += 1
            continue
        for shift in range(-1, 2):
            out[count] = e * num_phi + (iphi + shift) % num_phi
            count += 1

    return count


@nb.njit(cache=True)
def _insert(
    node: nb.int64,
    tile: nb.int64,
    head: nb.int64[:],
    nxt: nb.int64[:],
    prv: nb.int64[:],
) -> None:
    nxt[node], prv[node] = head[tile], -1
    if head[tile] > -1:
        prv[head[tile]] = node
    head[tile] = node


@nb.njit(cache=True)
def _remove(
    node: nb.int64,
    tile: nb.int64,
    head: nb.int64[:],
    nxt: nb.int64[:],
    prv: nb.int64[:],
) -> None:
    if prv[node] > -1:
        nxt[prv[node]] = nxt[node]
    else:
        head[tile] = nxt[node]
    if nxt[node] > -1:
        prv[nxt[node]] = prv[node]


@nb.njit(cache=True)
def _deactivate(
    node: nb.int64, alive: nb.int64[:], where: nb.int64[:], num_active: nb.int64
) -> nb.int64:
    last = alive[num_active - 1]
    alive[where[node]] = last
    where[last] = where[node]

    return num_active - 1


@nb.njit(cache=True)
def _find_neighbor(
    i: nb.int64,
    tiles: nb.int64[:],
    num_eta: nb.int64,
    num_phi: nb.int64,
    head: nb.int64[:],
    nxt: nb.int64[:],
    etas: nb.float64[:],
    phis: nb.float64[:],
    cap: nb.float64,
    nn: nb.int64[:],
    nn_dist: nb.float64[:],
    buf: nb.int64[:],
) -> None:
    nn[i], nn_dist[i] = -1, cap
    count = _adjacent_tiles(tiles[i], num_eta, num_phi, buf)
    for t in range(count):
        j = head[buf[t]]
        while j > -1:
            if j != i:
                dist = delta_r2(etas[i], phis[i], etas[j], phis[j])
                if dist < nn_dist[i]:
                    nn[i], nn_dist[i] = j, dist
            j = nxt[j]


@nb.njit(cache=True)
def recombine(
    mom: nb.float64[:, :],
    radius: nb.float64,
    p: nb.float64 = 0.0,
    n_exclusive: nb.int64 = -1,
    tiled: nb.boolean = True,
) -> (nb.float64[:, :], nb.int64[:, :], nb.int64[:]):
    """Runs generalized-kt sequential recombination on a set of four-momenta.

    Each node caches its geometric nearest neighbour within R. The smallest
    `d_ij` in the active set is always realized between a node and its
    geometric nearest neighbour, so each step scans the list of active nodes
    once. After a merge, only the nodes in the cells around the merged nodes
    have to update their neighbour.

    Parameters
    ----------
    mom : np.ndarray
        (N, 4) Input four-momenta (px, py, pz, E)
    radius : float
        Jet radius parameter R
    p : float, default 0.
        Exponent of the transverse momentum weight (0: C/A, 1: kt, -1: anti-kt)
    n_exclusive : int, default -1
        If positive, run in exclusive mode: never recombine with the beam and
        stop as soon as `n_exclusive` nodes remain
    tiled : bool, default True
        If `False`, use a single cell (every node is a neighbour candidate)

    Returns
    -------
    np.ndarray
        (M, 4) Four-momenta of every node in the history arena
    np.ndarray
        (M, 2) Parent node indexes of every node (-1 for leaves)
    np.ndarray
        (K) Indexes of the final nodes (inclusive jets, or the remaining nodes
        in exclusive mode), in the order they were finalized
    """
    num_leaves = len(mom)
    size = max(2 * num_leaves - 1, 0)
    exclusive = n_exclusive > 0

    # Without a beam, neighbours are searched for at any distance
    cap = radius * radius
    if exclusive:
        cap = np.inf
        tiled = False

    # Initialize the node arena with the input leaves
    nodes = np.empty((size, 4), dtype=np.float64)
    parents = np.full((size, 2), -1, dtype=np.int64)
    etas = np.empty(size, dtype=np.float64)
    phis = np.empty(size, dtype=np.float64)
    weights = np.empty(size, dtype=np.float64)
    for i in range(num_leaves):
        nodes[i] = mom[i]
        etas[i] = eta(mom[i])
        phis[i] = phi(mom[i])
        weights[i] = _weight(pt2(mom[i]), p)

    # Lay out the grid of cells, at least R wide in both directions
    num_eta, num_phi, eta_min, tile_eta = 1, 1, 0.0, 1.0
    if tiled and num_leaves > 0:
        eta_min = max(np.min(etas[:num_leaves]), -TILE_ETA_MAX)
        eta_max = min(np.max(etas[:num_leaves]), TILE_ETA_MAX)
        if eta_max - eta_min > radius:
            num_eta = int((eta_max - eta_min) / radius)
            tile_eta = (eta_max - eta_min) / num_eta
        num_phi = int(2.0 * np.pi / radius)
        if num_phi < 3:
            num_phi = 1

    # Register every leaf in its cell and in the list of active nodes
    head = np.full(num_eta * num_phi, -1, dtype=np.int64)
    nxt = np.full(size, -1, dtype=np.int64)
    prv = np.full(size, -1, dtype=np.int64)
    tiles = np.zeros(size, dtype=np.int64)
    alive = np.empty(size, dtype=np.int64)
    where = np.empty(size, dtype=np.int64)
    for i in range(num_leaves):
        tiles[i] = _tile_index(etas[i], phis[i], eta_min, tile_eta, num_eta, num_phi)
        _insert(i, tiles[i], head, nxt, prv)
        alive[i], where[i] = i, i

    # Build the initial nearest-neighbour cache
    buf = np.empty(9, dtype=np.int64)
    nn = np.full(size, -1, dtype=np.int64)
    nn_dist = np.full(size, cap, dtype=np.float64)
    for i in range(num_leaves):
        _find_neighbor(
            i, tiles, num_eta, num_phi, head, nxt, etas, phis, cap, nn, nn_dist, buf
        )

    # Recombine until there is nothing left to cluster
    local = np.empty(27, dtype=np.int64)
    marks = np.full(num_eta * num_phi, -1, dtype=np.int64)
    stale = np.empty(size, dtype=np.int64)
    finals = np.empty(num_leaves, dtype=np.int64)
    num_finals, num_active, num_nodes = 0, num_leaves, num_leaves
    while num_active > 0:
        if exclusive and num_active <= n_exclusive:
            break

        # Find the smallest distance. Beam distances are checked first so
        # that a pair exactly at the radius is not merged.
        best, best_i, to_beam = np.inf, -1, False
        for a in range(num_active):
            i = alive[a]
            if not exclusive:
                dib = weights[i] * cap
                if dib < best:
                    best, best_i, to_beam = dib, i, True
            if nn[i] > -1:
                dij = 0.0
                if nn_dist[i] > 0.0:
                    dij = min(weights[i], weights[nn[i]]) * nn_dist[i]
                if dij < best:
                    best, best_i, to_beam = dij, i, False

        if best_i < 0:
            break

        if to_beam:
            # The node becomes a final jet
            _remove(best_i, tiles[best_i], head, nxt, prv)
            num_active = _deactivate(best_i, alive, where, num_active)
            finals[num_finals] = best_i
            num_finals += 1

            # Nodes which pointed to it must look again
            num_stale = 0
            count = _adjacent_tiles(tiles[best_i], num_eta, num_phi, local)
            for t in range(count):
                m = head[local[t]]
                while m > -1:
                    if nn[m] == best_i:
                        stale[num_stale] = m
                        num_stale += 1
                    m = nxt[m]

            for s in range(num_stale):
                _find_neighbor(
                    stale[s],
                    tiles,
                    num_eta,
                    num_phi,
                    head,
                    nxt,
                    etas,
                    phis,
                    cap,
                    nn,
                    nn_dist,
                    buf,
                )

            continue

        # Merge the pair into a new node
        i, j, k = best_i, nn[best_i], num_nodes
        nodes[k] = nodes[i] + nodes[j]
        parents[k, 0], parents[k, 1] = i, j
        etas[k] = eta(nodes[k])
        phis[k] = phi(nodes[k])
        weights[k] = _weight(pt2(nodes[k]), p)
        tiles[k] = _tile_index(etas[k], phis[k], eta_min, tile_eta, num_eta, num_phi)
        num_nodes += 1

        _remove(i, tiles[i], head, nxt, prv)
        _remove(j, tiles[j], head, nxt, prv)
        num_active = _deactivate(i, alive, where, num_active)
        num_active = _deactivate(j, alive, where, num_active)
        _insert(k, tiles[k], head, nxt, prv)
        alive[num_active], where[k] = k, num_active
        num_active += 1

        # Gather the cells around the two merged nodes and the new one
        num_local = 0
        for node in (i, j, k):
            count = _adjacent_tiles(tiles[node], num_eta, num_phi, buf)
            for t in range(count):
                if marks[buf[t]] != k:
                    marks[buf[t]] = k
                    local[num_local] = buf[t]
                    num_local += 1

        # Update the nearest neighbours against the new node. Nodes which
        # pointed to a merged node must look again.
        num_stale = 0
        for t in range(num_local):
            m = head[local[t]]
            while m > -1:
                if m != k:
                    if nn[m] == i or nn[m] == j:
                        stale[num_stale] = m
                        num_stale += 1
                    else:
                        dist = delta_r2(etas[k], phis[k], etas[m], phis[m])
                        if dist < nn_dist[m]:
                            nn[m], nn_dist[m] = k, dist
                m = nxt[m]

        _find_neighbor(
            k, tiles, num_eta, num_phi, head, nxt, etas, phis, cap, nn, nn_dist, buf
        )
        for s in range(num_stale):
            _find_neighbor(
                stale[s],
                tiles,
                num_eta,
                num_phi,
                head,
                nxt,
                etas,
                phis,
                cap,
                nn,
                nn_dist,
                buf,
            )

    # In exclusive mode, the remaining active nodes are the final objects
    if exclusive:
        for i in np.sort(alive[:num_active]):
            finals[num_finals] = i
            num_finals += 1

    return nodes[:num_nodes], parents[:num_nodes], finals[:num_finals]


@nb.njit(cache=True)
def leaves(parents: nb.int64[:, :], node: nb.int64) -> nb.int64[:]:
    """Returns the leaves of the history tree below a given node.

    Parameters
    ----------
    parents : np.ndarray
        (M, 2) Parent node indexes of every node (-1 for leaves)
    node : int
        Index of the root node

    Returns
    -------
    np.ndarray
        (L) Sorted indexes of the leaves below the root node
    """
    result = np.empty(len(parents), dtype=np.int64)
    stack = np.empty(len(parents), dtype=np.int64)
    num_leaves, depth = 0, 1
    stack[0] = node
    while depth > 0:
        depth -= 1
        current = stack[depth]
        if parents[current, 0] < 0:
            result[num_leaves] = current
            num_leaves += 1
        else:
            stack[depth] = parents[current, 0]
            stack[depth + 1] = parents[current, 1]
            depth += 2

    return np.sort(result[:num_leaves])


@nb.njit(cache=True)
def assign_leaves(
    parents: nb.int64[:, :], finals: nb.int64[:], num_leaves: nb.int64
) -> nb.int64[:]:
    """Labels every leaf with the final node it was clustered into.

    Parameters
    ----------
    parents : np.ndarray
        (M, 2) Parent node indexes of every node (-1 for leaves)
    finals : np.ndarray
        (K) Indexes of the final nodes
    num_leaves : int
        Number of leaves at the front of the arena

    Returns
    -------
    np.ndarray
        (N) Position in `finals` of the final node above each leaf (-1 if the
        leaf is not below any final node)
    """
    labels = np.full(num_leaves, -1, dtype=np.int64)
    stack = np.empty(max(len(parents), 1), dtype=np.int64)
    for f in range(len(finals)):
        depth = 1
        stack[0] = finals[f]
        while depth > 0:
            depth -= 1
            current = stack[depth]
            if parents[current, 0] < 0:
                labels[current] = f
            else:
                stack[depth] = parents[current, 0]
                stack[depth + 1] = parents[current, 1]
                depth += 2

    return labels
