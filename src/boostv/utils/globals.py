"""Defines constants shared across the package."""

# Sentinel returned by trigger matching when there is nothing to match to
NO_MATCH_DR = 999.0

# Largest radius accepted by the recombination kernel. Clustering at this
# radius merges every input into a single history tree.
MAX_ALLOWABLE_R = 1000.0

# Generator status code of stable final-state particles
STABLE_STATUS = 1

# Default trigger name patterns and the bit they set in the trigger mask
TRIGGER_BITS = {
    "MonoCentralPFJet80_PFMETnoMu": 0,
    "HLT_MET120_HBHENoiseCleaned_v": 1,
}

# Default pattern used to select the jet trigger objects
JET_TRIGGER_PATTERN = "MonoCentralPFJet80_PFMETnoMu"

# Default cap on the number of particles clustered in one event
MAX_PARTICLES = 10000
