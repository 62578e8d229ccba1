"""Sequential recombination jet clustering with ghost-based jet areas.

The recombination itself is done by the compiled kernel in
:mod:`boostv.math.cluster`. This module wraps its output into a
:class:`ClusterSequence` history and turns the final nodes into
:class:`Jet` objects.

Jet areas are measured by adding a dense grid of infinitely soft particles
(ghosts) to the event. The ghosts never alter the recombination of the real
particles, the number of ghosts a jet absorbs measures its catchment area.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from boostv.data import Jet, to_momenta
from boostv.math import from_pt_eta_phi_m, pt
from boostv.math.cluster import ALGORITHMS, assign_leaves, leaves, recombine
from boostv.utils.globals import MAX_ALLOWABLE_R
from boostv.utils.logger import logger

__all__ = ["AreaDefinition", "ClusterSequence", "JetClusterer"]


@dataclass
class AreaDefinition:
    """Ghost layout used to measure jet areas.

    Attributes
    ----------
    ghost_area : float
        Target area of one ghost cell in the (eta, phi) plane
    ghost_eta_max : float
        Ghosts cover the |eta| <= `ghost_eta_max` band
    repeats : int
        Number of independent ghost layouts to average the area over
    grid_scatter : float
        Fraction of a cell by which ghosts are randomly moved off the grid
    mean_ghost_pt : float
        Transverse momentum of each ghost
    seed : int, optional
        Seed of the random number generator which jitters the ghosts
    """

    ghost_area: float = 0.01
    ghost_eta_max: float = 7.0
    repeats: int = 1
    grid_scatter: float = 1.0
    mean_ghost_pt: float = 1e-100
    seed: Optional[int] = None

    def __post_init__(self):
        """Check the parameters and derive the grid geometry."""
        if self.ghost_area <= 0.0:
            raise ValueError(f"`ghost_area` must be positive, got {self.ghost_area}.")
        if self.ghost_eta_max <= 0.0:
            raise ValueError(
                f"`ghost_eta_max` must be positive, got {self.ghost_eta_max}."
            )
        if self.repeats < 1:
            raise ValueError(f"`repeats` must be at least 1, got {self.repeats}.")

        # Round the number of cells, then adjust the cell size to tile exactly
        side = np.sqrt(self.ghost_area)
        self.num_eta = max(int(np.ceil(2.0 * self.ghost_eta_max / side)), 1)
        self.num_phi = max(int(np.ceil(2.0 * np.pi / side)), 1)
        self.cell_eta = 2.0 * self.ghost_eta_max / self.num_eta
        self.cell_phi = 2.0 * np.pi / self.num_phi

        self._rng = np.random.default_rng(self.seed)

    def reseed(self, entry):
        """Restarts the ghost jitter from a stream specific to one entry.

        The layouts of an entry then only depend on `seed` and on the entry
        index, not on the events processed before it.

        Parameters
        ----------
        entry : int
            Index of the entry in the input file(s)
        """
        if self.seed is not None:
            self._rng = np.random.default_rng([self.seed, int(entry)])

    @property
    def cell_area(self):
        """Actual area of one ghost cell once the grid is tiled."""
        return self.cell_eta * self.cell_phi

    @property
    def num_ghosts(self):
        """Number of ghosts in one layout."""
        return self.num_eta * self.num_phi

    def ghosts(self):
        """Produces one layout of ghost four-momenta.

        Returns
        -------
        np.ndarray
            (G, 4) Ghost four-momenta (px, py, pz, E)
        """
        ieta, iphi = np.meshgrid(
            np.arange(self.num_eta), np.arange(self.num_phi), indexing="ij"
        )
        etas = -self.ghost_eta_max + (ieta.flatten() + 0.5) * self.cell_eta
        phis = -np.pi + (iphi.flatten() + 0.5) * self.cell_phi
        if self.grid_scatter > 0.0:
            shifts = self._rng.uniform(-0.5, 0.5, size=(2, self.num_ghosts))
            etas = etas + self.grid_scatter * shifts[0] * self.cell_eta
            phis = phis + self.grid_scatter * shifts[1] * self.cell_phi

        pts = np.full(self.num_ghosts, self.mean_ghost_pt, dtype=np.float64)
        masses = np.zeros(self.num_ghosts, dtype=np.float64)

        return from_pt_eta_phi_m(pts, etas, phis, masses)


class ClusterSequence:
    """Recombination history of one set of four-momenta.

    The history is a flat arena of nodes. The first `num_leaves` nodes are the
    inputs, the first `num_real` of which are real particles (the rest are
    ghosts). Every subsequent node has two parents referenced by index.

    Attributes
    ----------
    nodes : np.ndarray
        (M, 4) Four-momentum of every node
    parents : np.ndarray
        (M, 2) Parent indexes of every node (-1 for leaves)
    finals : np.ndarray
        (K) Indexes of the final nodes (inclusive jets)
    num_real : int
        Number of real (non-ghost) leaves
    """

    def __init__(self, momenta, radius, algorithm="cambridge", num_real=None):
        """Runs the recombination.

        Parameters
        ----------
        momenta : np.ndarray
            (N, 4) Input four-momenta, real particles first
        radius : float
            Jet radius parameter
        algorithm : str, default 'cambridge'
            Recombination algorithm, one of `cambridge`, `kt` or `antikt`
        num_real : int, optional
            Number of real particles at the front of `momenta`. If not
            specified, every input is considered real.
        """
        if algorithm not in ALGORITHMS:
            raise ValueError(
                f"Clustering algorithm not recognized: {algorithm}. "
                f"Must be one of {list(ALGORITHMS.keys())}."
            )
        if radius <= 0.0 or radius > MAX_ALLOWABLE_R:
            raise ValueError(
                f"Jet radius must be in (0, {MAX_ALLOWABLE_R}], got {radius}."
            )

        momenta = np.ascontiguousarray(momenta, dtype=np.float64).reshape(-1, 4)
        self.num_leaves = len(momenta)
        self.num_real = self.num_leaves if num_real is None else num_real
        self.nodes, self.parents, self.finals = recombine(
            momenta, float(radius), ALGORITHMS[algorithm]
        )
        self._labels = None

    def __len__(self):
        """Number of nodes in the history."""
        return len(self.nodes)

    def is_leaf(self, node):
        """Whether a node is an input."""
        return node < self.num_leaves

    def children(self, node):
        """Returns the two parents a node was merged from.

        Parameters
        ----------
        node : int
            Node index

        Returns
        -------
        Tuple[int, int]
            Indexes of the two parent nodes (-1 for leaves)
        """
        return int(self.parents[node, 0]), int(self.parents[node, 1])

    def leaves(self, node):
        """Returns all the inputs below a node, ghosts included."""
        return leaves(self.parents, node)

    def constituents(self, node):
        """Returns the real particles below a node.

        Parameters
        ----------
        node : int
            Node index

        Returns
        -------
        np.ndarray
            Sorted indexes of the real particles below the node
        """
        index = self.leaves(node)
        return index[index < self.num_real]

    def num_ghosts(self, node):
        """Returns the number of ghosts below a node."""
        return int(np.sum(self.leaves(node) >= self.num_real))

    @property
    def labels(self):
        """Position in `finals` of the final node each input ends up in."""
        if self._labels is None:
            self._labels = assign_leaves(self.parents, self.finals, self.num_leaves)

        return self._labels


class JetClusterer:
    """Clusters particles into jets, measures their area if requested.

    Typical configuration should look like:

    .. code-block:: yaml

        cone_size: 0.8
        area:
          ghost_area: 0.01
          ghost_eta_max: 7.0
          repeats: 1
    """

    def __init__(self, cone_size=0.8, algorithm="cambridge", area=None):
        """Initialize the clustering parameters.

        Parameters
        ----------
        cone_size : float, default 0.8
            Jet radius parameter R
        algorithm : str, default 'cambridge'
            Recombination algorithm, one of `cambridge`, `kt` or `antikt`
        area : Union[dict, AreaDefinition], optional
            Ghost area definition. If not specified, areas are not computed.
        """
        if cone_size <= 0.0 or cone_size > MAX_ALLOWABLE_R:
            raise ValueError(
                f"`cone_size` must be in (0, {MAX_ALLOWABLE_R}], got {cone_size}."
            )
        if algorithm not in ALGORITHMS:
            raise ValueError(
                f"Clustering algorithm not recognized: {algorithm}. "
                f"Must be one of {list(ALGORITHMS.keys())}."
            )

        self.cone_size = cone_size
        self.algorithm = algorithm
        self.area = area
        if isinstance(area, dict):
            self.area = AreaDefinition(**area)

    def sequence(self, momenta, ghosts=None):
        """Builds the recombination history of a set of four-momenta.

        Parameters
        ----------
        momenta : np.ndarray
            (N, 4) Real particle four-momenta
        ghosts : np.ndarray, optional
            (G, 4) Ghost four-momenta to append to the real particles

        Returns
        -------
        ClusterSequence
            Recombination history
        """
        num_real = len(momenta)
        if ghosts is not None and len(ghosts):
            momenta = np.vstack((momenta, ghosts))

        return ClusterSequence(momenta, self.cone_size, self.algorithm, num_real)

    def cluster(self, particles):
        """Clusters a list of particles into jets.

        Parameters
        ----------
        particles : Union[List[Particle], np.ndarray]
            Input particles or their (N, 4) four-momenta

        Returns
        -------
        List[Jet]
            Jets sorted by non-increasing transverse momentum. The constituent
            indexes refer to positions in the input list.
        """
        momenta = particles
        if not isinstance(particles, np.ndarray):
            momenta = to_momenta(particles)
        momenta = np.asarray(momenta, dtype=np.float64).reshape(-1, 4)
        if not len(momenta):
            return []

        # Without area, a single pass over the real particles is enough
        if self.area is None:
            seq = self.sequence(momenta)
            jets = []
            for node in seq.finals:
                index = seq.constituents(node)
                momentum = momenta[index].sum(axis=0)
                jets.append(Jet(momentum=momentum, constituents=index))

            return self.sort(jets)

        # With area, repeat the clustering with independent ghost layouts.
        # Final nodes made of ghosts only are not jets.
        jets, counts = {}, {}
        for repeat in range(self.area.repeats):
            seq = self.sequence(momenta, self.area.ghosts())
            labels = seq.labels
            real = labels[: seq.num_real]
            ghost_counts = np.bincount(
                labels[seq.num_real :], minlength=len(seq.finals)
            )
            for label in np.unique(real):
                index = np.flatnonzero(real == label)
                key = tuple(index)
                if repeat == 0:
                    jets[key] = Jet(
                        momentum=momenta[index].sum(axis=0), constituents=index
                    )
                    counts[key] = 0
                elif key not in jets:
                    logger.debug(
                        "Jet with %d constituents not found in the first ghost "
                        "layout, ignoring its area.",
                        len(index),
                    )
                    continue

                counts[key] += int(ghost_counts[label])

        for key, jet in jets.items():
            jet.num_ghosts = counts[key] / self.area.repeats
            jet.area = jet.num_ghosts * self.area.cell_area

        return self.sort(list(jets.values()))

    @staticmethod
    def sort(jets):
        """Sorts jets by non-increasing transverse momentum.

        Parameters
        ----------
        jets : List[Jet]
            Jets to sort

        Returns
        -------
        List[Jet]
            Sorted jets
        """
        if not jets:
            return jets

        pts = np.array([pt(jet.momentum) for jet in jets])
        order = np.argsort(-pts, kind="stable")

        return [jets[i] for i in order]
