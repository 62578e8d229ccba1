"""Module with a data class object which represents a reconstructed jet."""

from dataclasses import dataclass

import numpy as np

from boostv.math import eta, mass, phi, pt

from .base import DataBase

__all__ = ["Jet"]


@dataclass(eq=False)
class Jet(DataBase):
    """Jet produced by the clustering engine (or by pruning one).

    Attributes
    ----------
    momentum : np.ndarray
        (4) Four-momentum (px, py, pz, E)
    area : float
        Catchment area measured with ghosts (-1 if not computed)
    num_ghosts : int
        Number of ghosts absorbed by the jet (averaged over repeats)
    constituents : np.ndarray
        (C) Indexes of the constituent particles in the clustered particle list
    pruned : bool
        Whether the jet went through pruning
    """

    momentum: np.ndarray = None
    area: float = -1.0
    num_ghosts: float = 0.0
    constituents: np.ndarray = None
    pruned: bool = False

    # Fixed-length attributes
    _fixed_length_attrs = (("momentum", 4),)

    # Variable-length attributes
    _var_length_attrs = (("constituents", np.int64),)

    # Four-momentum attributes
    _mom_attrs = ("momentum",)

    def __str__(self):
        """Human-readable string representation of the jet."""
        return (
            f"Jet(pt={self.pt:.3f}, eta={self.eta:.3f}, phi={self.phi:.3f}, "
            f"m={self.m:.3f}, area={self.area:.3f}, "
            f"size={len(self.constituents)})"
        )

    @property
    def size(self):
        """Number of constituents."""
        return len(self.constituents)

    @property
    def pt(self):
        """Transverse momentum."""
        return pt(self.momentum)

    @property
    def eta(self):
        """Pseudorapidity."""
        return eta(self.momentum)

    @property
    def phi(self):
        """Azimuthal angle."""
        return phi(self.momentum)

    @property
    def m(self):
        """Invariant mass."""
        return mass(self.momentum)

    @property
    def direction(self):
        """Direction as an (eta, phi) array."""
        return np.array([self.eta, self.phi], dtype=np.float64)
