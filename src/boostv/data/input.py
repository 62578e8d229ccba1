"""Module with the data classes which represent the inputs of one event.

The upstream collections come in a few concrete kinds. Each input class
carries a `kind` tag so that a whole collection can be checked once, when it
is converted to clustering inputs, rather than element by element downstream.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .trigger import TriggerObject

__all__ = ["InputKind", "PFCandidate", "MCParticle", "PFJet", "EventInputs"]


class InputKind(Enum):
    """Enumerated input object kinds."""

    PF_CANDIDATE = "pf_candidate"
    MC_PARTICLE = "mc_particle"
    PF_JET = "pf_jet"


@dataclass
class PFCandidate:
    """Particle-flow candidate.

    Attributes
    ----------
    px, py, pz, e : float
        Four-momentum components
    """

    kind = InputKind.PF_CANDIDATE

    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    e: float = 0.0


@dataclass
class MCParticle:
    """Generator-level particle.

    Attributes
    ----------
    px, py, pz, e : float
        Four-momentum components
    status : int
        Generator status code (1 for stable final-state particles)
    """

    kind = InputKind.MC_PARTICLE

    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    e: float = 0.0
    status: int = -1


@dataclass
class PFJet:
    """Jet of the upstream reconstruction, made of particle-flow candidates.

    Attributes
    ----------
    px, py, pz, e : float
        Four-momentum components
    candidates : List[PFCandidate]
        Ordered list of constituent candidates
    """

    kind = InputKind.PF_JET

    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    e: float = 0.0
    candidates: List[PFCandidate] = field(default_factory=list)


@dataclass
class EventInputs:
    """All the inputs needed to process one event.

    Attributes
    ----------
    jets : list
        Primary jet collection (expected to hold :class:`PFJet` objects)
    candidates : list
        Flat particle-flow candidate collection of the event
    trigger_objects : List[TriggerObject], optional
        Trigger objects of the event, `None` if the collection is missing
    mc_particles : List[MCParticle], optional
        Generator-level particles, `None` if the collection is missing
    is_data : bool
        `False` if the event is simulated (enables the generator branch)
    run : int
        Run ID
    event : int
        Event ID
    """

    jets: list = field(default_factory=list)
    candidates: list = field(default_factory=list)
    trigger_objects: Optional[List[TriggerObject]] = None
    mc_particles: Optional[List[MCParticle]] = None
    is_data: bool = True
    run: int = -1
    event: int = -1
