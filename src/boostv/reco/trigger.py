"""Matching of reconstructed jets to online trigger objects."""

import numpy as np

from boostv.math.distance import closest
from boostv.utils.errors import MissingCollectionError
from boostv.utils.globals import JET_TRIGGER_PATTERN, NO_MATCH_DR, TRIGGER_BITS

__all__ = ["TriggerMatcher"]


class TriggerMatcher:
    """Finds the trigger object closest to a jet and builds trigger bitmasks.

    Only the trigger objects whose name contains `match_pattern` are
    considered for matching. That subset is computed once per event by
    :meth:`set_event` and reused for every jet of the event.

    Typical configuration should look like:

    .. code-block:: yaml

        trigger:
          match_pattern: MonoCentralPFJet80_PFMETnoMu
          bits:
            MonoCentralPFJet80_PFMETnoMu: 0
            HLT_MET120_HBHENoiseCleaned_v: 1
    """

    def __init__(self, match_pattern=JET_TRIGGER_PATTERN, bits=None):
        """Initialize the matcher.

        Parameters
        ----------
        match_pattern : str, default 'MonoCentralPFJet80_PFMETnoMu'
            Substring a trigger object name must contain to be matched to
        bits : Dict[str, int], optional
            Map from a trigger name substring to the bit it sets in the
            trigger mask
        """
        self.match_pattern = match_pattern
        self.bits = dict(TRIGGER_BITS if bits is None else bits)
        for pattern, bit in self.bits.items():
            if not isinstance(bit, int) or bit < 0 or bit > 62:
                raise ValueError(
                    f"Trigger bit of `{pattern}` must be an integer in [0, 62], "
                    f"got {bit}."
                )

        self._directions = np.empty((0, 2), dtype=np.float64)
        self._mask = 0

    @property
    def num_matchable(self):
        """Number of trigger objects which pass the name filter."""
        return len(self._directions)

    @property
    def mask(self):
        """Trigger bitmask of the current event."""
        return self._mask

    def set_event(self, trigger_objects):
        """Caches the filtered trigger objects of a new event.

        Parameters
        ----------
        trigger_objects : List[TriggerObject]
            Trigger objects of the event, `None` if the collection is missing

        Raises
        ------
        MissingCollectionError
            If the collection is missing. The cache is emptied first, so
            matching still returns the no-match value.
        """
        self._directions = np.empty((0, 2), dtype=np.float64)
        self._mask = 0
        if trigger_objects is None:
            raise MissingCollectionError("Trigger object collection is missing.")

        selected = [o for o in trigger_objects if self.match_pattern in o.name]
        if selected:
            self._directions = np.vstack([o.direction for o in selected])

        self._mask = self.trigger_mask(trigger_objects)

    def min_delta_r(self, direction):
        """Smallest Delta-R between a direction and the cached trigger objects.

        Parameters
        ----------
        direction : np.ndarray
            (2) Direction (eta, phi), typically that of a jet

        Returns
        -------
        float
            Smallest Delta-R, 999 if there is no trigger object to match to
        """
        if not len(self._directions):
            return NO_MATCH_DR

        direction = np.asarray(direction, dtype=np.float64)
        _, dr = closest(direction, self._directions)

        return float(dr)

    def trigger_mask(self, trigger_objects):
        """Builds the trigger bitmask of a set of trigger objects.

        Parameters
        ----------
        trigger_objects : List[TriggerObject]
            Trigger objects of the event

        Returns
        -------
        int
            Bitmask in which bit `b` is set if any object name contains a
            pattern mapped to `b`
        """
        mask = 0
        if trigger_objects is None:
            return mask

        for pattern, bit in self.bits.items():
            if any(pattern in o.name for o in trigger_objects):
                mask |= 1 << bit

        return mask
