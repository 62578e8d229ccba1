"""Exceptions and warnings raised by the reconstruction chain.

Conditions which concern a single event derive from :class:`EventSkip`. They
are caught by the pipeline, which counts them under their `reason` tag and
moves on to the next event. None of them is fatal to a run.
"""

__all__ = [
    "EventSkip",
    "InputTypeError",
    "ParticleLimitExceeded",
    "NoJetsFound",
    "BelowThreshold",
    "MissingCollectionError",
    "DegenerateAxisSetWarning",
]


class EventSkip(Exception):
    """Base class of all conditions which cause an event to be skipped."""

    reason = "skip"


class InputTypeError(EventSkip, TypeError):
    """An input element is not of the expected candidate kind."""

    reason = "input_type"


class ParticleLimitExceeded(EventSkip):
    """The input collection exceeds the configured particle count cap."""

    reason = "particle_limit"


class NoJetsFound(EventSkip):
    """Clustering produced no jet."""

    reason = "no_jets"


class BelowThreshold(EventSkip):
    """The leading jet does not pass the transverse momentum cut."""

    reason = "below_threshold"


class MissingCollectionError(KeyError):
    """An optional input collection (trigger objects, generator particles)
    is not available in the event."""

    def __str__(self):
        """Plain message, without the quotes `KeyError` puts around it."""
        return str(self.args[0]) if self.args else ""


class DegenerateAxisSetWarning(UserWarning):
    """More N-subjettiness axes were requested than there are constituents."""
