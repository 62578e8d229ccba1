"""Module with fast, Numba-accelerated, compiled math routines.

This includes multiple submodules:
- `base.py` includes four-momentum kinematics (pt, eta, phi, mass)
- `distance.py` includes angular (Delta-R) distance functions
- `cluster.py` includes the sequential recombination clustering kernel
- `subjet.py` includes subjet axis finding routines
"""

# Expose submodules
from . import cluster, distance, subjet

# Expose all base functions directly
from .base import *
