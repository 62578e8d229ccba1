"""Tests for the matching of jets to trigger objects."""

import numpy as np
import pytest

from boostv.data import TriggerObject
from boostv.reco import TriggerMatcher
from boostv.utils.errors import MissingCollectionError
from boostv.utils.globals import NO_MATCH_DR


@pytest.fixture(name="trigger_objects")
def fixture_trigger_objects():
    """Trigger objects of two jet paths and one missing energy path."""
    return [
        TriggerObject("hltMonoCentralPFJet80_PFMETnoMu", 0.5, 1.0),
        TriggerObject("HLT_MET120_HBHENoiseCleaned_v3", 0.0, 0.0),
        TriggerObject("hltMonoCentralPFJet80_PFMETnoMu", -1.0, -3.0),
    ]


class TestTriggerMatcher:
    """Test the trigger object matching."""

    def test_invalid_bits(self):
        """Test that bits outside of a 64-bit mask are rejected."""
        with pytest.raises(ValueError):
            TriggerMatcher(bits={"HLT_A": 63})
        with pytest.raises(ValueError):
            TriggerMatcher(bits={"HLT_A": -1})

    def test_no_event(self):
        """Test that nothing matches before an event is set."""
        matcher = TriggerMatcher()
        assert matcher.num_matchable == 0
        assert matcher.mask == 0
        assert matcher.min_delta_r([0.0, 0.0]) == NO_MATCH_DR

    def test_min_delta_r(self, trigger_objects):
        """Test that only objects which pass the name filter are matched."""
        matcher = TriggerMatcher()
        matcher.set_event(trigger_objects)
        assert matcher.num_matchable == 2

        # The missing energy object at (0, 0) is ignored
        assert matcher.min_delta_r([0.0, 0.0]) == pytest.approx(np.hypot(0.5, 1.0))

        # Matching across the azimuth boundary
        assert matcher.min_delta_r([-1.0, 3.0]) == pytest.approx(2 * np.pi - 6.0)

    def test_empty_filter(self, trigger_objects):
        """Test the sentinel when no object passes the name filter."""
        matcher = TriggerMatcher(match_pattern="PFHT900")
        matcher.set_event(trigger_objects)
        assert matcher.num_matchable == 0
        assert matcher.min_delta_r([0.5, 1.0]) == NO_MATCH_DR

        matcher.set_event([])
        assert matcher.min_delta_r([0.5, 1.0]) == NO_MATCH_DR

    def test_missing_collection(self, trigger_objects):
        """Test that a missing collection raises and clears the cache."""
        matcher = TriggerMatcher()
        matcher.set_event(trigger_objects)
        assert matcher.mask != 0

        with pytest.raises(MissingCollectionError) as err:
            matcher.set_event(None)

        assert isinstance(err.value, KeyError)
        assert str(err.value) == "Trigger object collection is missing."

        assert matcher.num_matchable == 0
        assert matcher.mask == 0
        assert matcher.min_delta_r([0.5, 1.0]) == NO_MATCH_DR

    def test_mask(self, trigger_objects):
        """Test the trigger bitmask."""
        matcher = TriggerMatcher()
        matcher.set_event(trigger_objects)
        assert matcher.mask == 0b11

        assert matcher.trigger_mask(trigger_objects[:1]) == 0b01
        assert matcher.trigger_mask(trigger_objects[1:2]) == 0b10
        assert matcher.trigger_mask([]) == 0
        assert matcher.trigger_mask(None) == 0

    def test_custom_bits(self, trigger_objects):
        """Test a user-defined pattern to bit map."""
        matcher = TriggerMatcher(bits={"MET120": 5, "PFHT900": 2})
        assert matcher.trigger_mask(trigger_objects) == 1 << 5
