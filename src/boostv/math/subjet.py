"""Numba JIT compiled routines used to find and score subjet axes."""

import numba as nb
import numpy as np

from .base import eta, phi, pt
from .cluster import recombine
from .distance import delta_phi, delta_r

__all__ = ["kt_axes", "assign_axes", "angular_sum", "refine_axes"]

# Radius used when seeding axes (pair-wise merges only)
SEED_RADIUS = 1000.0


@nb.njit(cache=True)
def kt_axes(mom: nb.float64[:, :], n_axes: nb.int64) -> nb.float64[:, :]:
    """Seeds subjet axes with exclusive kt clustering.

    The constituents are merged pair-wise with the kt distance
    `min(pt_i^2, pt_j^2) DeltaR_ij^2` until exactly `n_axes` groups remain.

    Parameters
    ----------
    mom : np.ndarray
        (N, 4) Constituent four-momenta, with N >= `n_axes`
    n_axes : int
        Number of axes to produce

    Returns
    -------
    np.ndarray
        (n_axes, 2) Axis directions as (eta, phi)
    """
    nodes, _, finals = recombine(mom, SEED_RADIUS, 1.0, n_axes)
    axes = np.empty((len(finals), 2), dtype=np.float64)
    for a in range(len(finals)):
        axes[a, 0] = eta(nodes[finals[a]])
        axes[a, 1] = phi(nodes[finals[a]])

    return axes


@nb.njit(cache=True)
def assign_axes(
    etas: nb.float64[:], phis: nb.float64[:], axes: nb.float64[:, :]
) -> (nb.int64[:], nb.float64[:]):
    """Assigns each constituent to its closest axis.

    Parameters
    ----------
    etas : np.ndarray
        (N) Constituent pseudorapidities
    phis : np.ndarray
        (N) Constituent azimuths
    axes : np.ndarray
        (A, 2) Axis directions as (eta, phi)

    Returns
    -------
    np.ndarray
        (N) Index of the closest axis of each constituent
    np.ndarray
        (N) Delta-R to the closest axis
    """
    labels = np.empty(len(etas), dtype=np.int64)
    dists = np.empty(len(etas), dtype=np.float64)
    for i in range(len(etas)):
        labels[i], dists[i] = -1, np.inf
        for a in range(len(axes)):
            dr = delta_r(etas[i], phis[i], axes[a, 0], axes[a, 1])
            if dr < dists[i]:
                labels[i], dists[i] = a, dr

    return labels, dists


@nb.njit(cache=True)
def angular_sum(
    pts: nb.float64[:], dists: nb.float64[:], kappa: nb.float64
) -> nb.float64:
    """Transverse momentum weighted sum of angular distances to the axes.

    Parameters
    ----------
    pts : np.ndarray
        (N) Constituent transverse momenta
    dists : np.ndarray
        (N) Delta-R of each constituent to its closest axis
    kappa : float
        Angular exponent

    Returns
    -------
    float
        Sum of `pt_i * DeltaR_i^kappa`
    """
    total = 0.0
    for i in range(len(pts)):
        total += pts[i] * dists[i] ** kappa

    return total


@nb.njit(cache=True)
def refine_axes(
    mom: nb.float64[:, :],
    axes: nb.float64[:, :],
    kappa: nb.float64,
    max_iterations: nb.int64,
) -> (nb.float64[:, :], nb.float64):
    """Iteratively refines a set of axes.

    Each constituent is assigned to its nearest axis, each axis is moved to
    the transverse momentum weighted centroid of its constituents (azimuths are
    averaged relative to the current axis). The procedure stops when the
    assignment is stable or after `max_iterations` passes. The axes with the
    smallest angular sum seen along the way are returned.

    Parameters
    ----------
    mom : np.ndarray
        (N, 4) Constituent four-momenta
    axes : np.ndarray
        (A, 2) Seed axis directions as (eta, phi)
    kappa : float
        Angular exponent
    max_iterations : int
        Maximum number of assignment passes

    Returns
    -------
    np.ndarray
        (A, 2) Best axis directions
    float
        Angular sum of the best axes
    """
    num = len(mom)
    pts = np.empty(num, dtype=np.float64)
    etas = np.empty(num, dtype=np.float64)
    phis = np.empty(num, dtype=np.float64)
    for i in range(num):
        pts[i] = pt(mom[i])
        etas[i] = eta(mom[i])
        phis[i] = phi(mom[i])

    current = axes.copy()
    best_axes, best_sum = axes.copy(), np.inf
    previous = np.full(num, -1, dtype=np.int64)
    for _ in range(max(max_iterations, 1)):
        labels, dists = assign_axes(etas, phis, current)
        total = angular_sum(pts, dists, kappa)
        if total < best_sum:
            best_axes, best_sum = current.copy(), total

        if np.all(labels == previous):
            break
        previous = labels

        # Move each axis to the centroid of its constituents
        for a in range(len(current)):
            weight, deta, dphi = 0.0, 0.0, 0.0
            for i in range(num):
                if labels[i] == a:
                    weight += pts[i]
                    deta += pts[i] * (etas[i] - current[a, 0])
                    dphi += pts[i] * delta_phi(current[a, 1], phis[i])
            if weight > 0.0:
                current[a, 0] += deta / weight
                current[a, 1] = current[a, 1] + dphi / weight
                current[a, 1] = delta_phi(0.0, current[a, 1])

    return best_axes, best_sum
