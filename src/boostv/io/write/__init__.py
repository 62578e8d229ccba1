"""Writers which store analysis records to files."""

from .csv import *
