"""Readers which load event inputs from files."""

from .hdf5 import *
