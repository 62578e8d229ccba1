"""Event reconstruction stages.

- `collect`: input collections to clustering inputs
- `cluster`: sequential recombination clustering and jet areas
- `prune`: jet pruning
- `nsubjettiness`: N-subjettiness substructure observables
- `trigger`: trigger object matching and trigger bitmasks
"""

from .cluster import AreaDefinition, ClusterSequence, JetClusterer
from .collect import ParticleCollector
from .nsubjettiness import Nsubjettiness
from .prune import Pruner
from .trigger import TriggerMatcher
