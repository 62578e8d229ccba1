"""Module with a data class object which represents an online trigger object."""

from dataclasses import dataclass

import numpy as np

from .base import DataBase

__all__ = ["TriggerObject"]


@dataclass(eq=False)
class TriggerObject(DataBase):
    """Direction reconstructed online and attached to a named trigger path.

    Attributes
    ----------
    name : str
        Name of the trigger path which produced the object
    eta : float
        Pseudorapidity
    phi : float
        Azimuthal angle
    """

    name: str = ""
    eta: float = -np.inf
    phi: float = -np.inf

    def __post_init__(self):
        """Casts names stored as binary objects (HDF5) back to strings."""
        super().__post_init__()
        if isinstance(self.name, bytes):
            self.name = self.name.decode()

    @property
    def direction(self):
        """Direction as an (eta, phi) array."""
        return np.array([self.eta, self.phi], dtype=np.float64)
