"""Data structures used throughout the boostv package.

- `input`: upstream collections of one event (candidates, generator
  particles, jets) and the `EventInputs` container
- `particle`: clustering inputs
- `jet`: reconstructed (and pruned) jets
- `trigger`: online trigger objects
- `record`: per-event analysis output
"""

from .input import *
from .jet import *
from .particle import *
from .record import *
from .trigger import *
