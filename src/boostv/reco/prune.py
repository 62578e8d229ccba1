"""Jet pruning, which removes soft and wide-angle radiation from a jet."""

import numpy as np

from boostv.data import Jet, to_momenta
from boostv.math import eta, mass, phi, pt
from boostv.math.distance import delta_r
from boostv.utils.globals import MAX_ALLOWABLE_R

from .cluster import ClusterSequence

__all__ = ["Pruner"]


class Pruner:
    """Prunes jets by walking their Cambridge/Aachen history from the top.

    The constituents of the jet are reclustered into a single history tree.
    At each merge, the parents are ordered such that `pt(A) >= pt(B)` and the
    softer branch B is discarded if

    .. math::

        z = \\frac{p_{T,B}}{p_{T,A} + p_{T,B}} < z_{cut}
        \\quad \\text{and} \\quad
        \\Delta R_{AB} > R_{cut} = f_{cut} \\frac{2 m_{jet}}{p_{T,jet}}

    Typical configuration should look like:

    .. code-block:: yaml

        pruning:
          zcut: 0.1
          rcut_factor: 0.5
    """

    def __init__(self, zcut=0.1, rcut_factor=0.5):
        """Initialize the pruning parameters.

        Parameters
        ----------
        zcut : float, default 0.1
            Minimum transverse momentum fraction of the softer branch
        rcut_factor : float, default 0.5
            Factor applied to `2 m / pt` to get the angular cut
        """
        if not 0.0 <= zcut <= 1.0:
            raise ValueError(f"`zcut` must be in [0, 1], got {zcut}.")
        if rcut_factor < 0.0:
            raise ValueError(f"`rcut_factor` must be non-negative, got {rcut_factor}.")

        self.zcut = zcut
        self.rcut_factor = rcut_factor

    def rcut(self, momentum):
        """Angular cut derived from the jet being pruned.

        Parameters
        ----------
        momentum : np.ndarray
            (4) Four-momentum of the unpruned jet

        Returns
        -------
        float
            Angular cut
        """
        return self.rcut_factor * 2.0 * mass(momentum) / pt(momentum)

    def prune(self, jet, particles):
        """Prunes one jet.

        Parameters
        ----------
        jet : Jet
            Jet to prune
        particles : Union[List[Particle], np.ndarray]
            Particles (or their (N, 4) four-momenta) the jet constituent
            indexes refer to

        Returns
        -------
        Jet
            Pruned jet. Its four-momentum is the sum of the retained
            constituents, which are a subset of the input jet's.
        """
        momenta = particles
        if not isinstance(particles, np.ndarray):
            momenta = to_momenta(particles)

        # Nothing to prune in jets with fewer than two constituents
        index = jet.constituents
        if len(index) < 2 or pt(jet.momentum) <= 0.0:
            return Jet(
                momentum=jet.momentum.copy(), constituents=index.copy(), pruned=True
            )

        # Recluster the constituents into a single history
        seq = ClusterSequence(momenta[index], MAX_ALLOWABLE_R)
        rcut = self.rcut(jet.momentum)

        # Walk the history from the top, drop the soft wide-angle branches
        keep = []
        stack = list(seq.finals)
        while stack:
            node = stack.pop()
            if seq.is_leaf(node):
                keep.append(node)
                continue

            node_a, node_b = seq.children(node)
            mom_a, mom_b = seq.nodes[node_a], seq.nodes[node_b]
            pt_a, pt_b = pt(mom_a), pt(mom_b)
            if pt_a < pt_b:
                node_a, node_b = node_b, node_a
                mom_a, mom_b = mom_b, mom_a
                pt_a, pt_b = pt_b, pt_a

            if pt_a + pt_b > 0.0:
                z = pt_b / (pt_a + pt_b)
                dr = delta_r(eta(mom_a), phi(mom_a), eta(mom_b), phi(mom_b))
                if z < self.zcut and dr > rcut:
                    stack.append(node_a)
                    continue

            stack.extend((node_a, node_b))

        keep = np.sort(np.asarray(keep, dtype=np.int64))
        constituents = index[keep]

        return Jet(
            momentum=momenta[constituents].sum(axis=0),
            constituents=constituents,
            pruned=True,
        )
