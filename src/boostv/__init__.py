"""Top-level module of the boostv source code.

Boosted-jet reconstruction: Cambridge/Aachen clustering with jet areas,
pruning, N-subjettiness and trigger matching, driven one event at a time.
"""

# Import main workflow entry points
from .driver import Driver
from .pipeline import BoostedVPipeline, PipelineConfig
from .version import __version__
