"""Module with a data class object which represents a clustering input."""

from dataclasses import dataclass

import numpy as np

from boostv.math import eta, mass, phi, pt

__all__ = ["Particle", "to_momenta"]


@dataclass(frozen=True)
class Particle:
    """Four-momentum fed to the jet clustering, tagged with its origin.

    Attributes
    ----------
    px : float
        Momentum along x
    py : float
        Momentum along y
    pz : float
        Momentum along z
    e : float
        Energy
    index : int
        Index of the particle in the collection it was built from
    """

    px: float
    py: float
    pz: float
    e: float
    index: int = -1

    @property
    def momentum(self):
        """Four-momentum as a (px, py, pz, E) array."""
        return np.array([self.px, self.py, self.pz, self.e], dtype=np.float64)

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


def to_momenta(particles):
    """Stacks the four-momenta of a list of particles.

    Parameters
    ----------
    particles : List[Particle]
        List of particles

    Returns
    -------
    np.ndarray
        (N, 4) Four-momenta (px, py, pz, E)
    """
    if not len(particles):
        return np.empty((0, 4), dtype=np.float64)

    return np.array([(p.px, p.py, p.pz, p.e) for p in particles], dtype=np.float64)
