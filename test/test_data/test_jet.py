"""Tests for the jet and input data classes."""

import numpy as np
import pytest

from boostv.data import (
    EventInputs,
    InputKind,
    Jet,
    MCParticle,
    Particle,
    PFCandidate,
    PFJet,
    TriggerObject,
)
from boostv.data.particle import to_momenta


class TestJet:
    """Test the reconstructed jet data class."""

    def test_jet_default(self):
        """Test Jet creation with default values."""
        jet = Jet()
        assert jet.momentum.shape == (4,)
        assert np.all(jet.momentum == -np.inf)
        assert jet.area == -1.0
        assert jet.size == 0
        assert jet.constituents.dtype == np.int64
        assert not jet.pruned

    def test_jet_kinematics(self):
        """Test the kinematic properties of a jet."""
        jet = Jet(momentum=[3.0, 4.0, 0.0, 13.0], constituents=[2, 0, 5])
        assert jet.pt == pytest.approx(5.0)
        assert jet.eta == pytest.approx(0.0)
        assert jet.phi == pytest.approx(np.arctan2(4.0, 3.0))
        assert jet.m == pytest.approx(12.0)
        assert jet.size == 3
        assert np.allclose(jet.direction, [0.0, np.arctan2(4.0, 3.0)])
        assert "pt=5.000" in str(jet)

    def test_jet_equality(self):
        """Test that jets compare equal attribute by attribute."""
        jet_a = Jet(momentum=[1.0, 0.0, 0.0, 1.0], constituents=[0, 1])
        jet_b = Jet(momentum=[1.0, 0.0, 0.0, 1.0], constituents=[0, 1])
        jet_c = Jet(momentum=[1.0, 0.0, 0.0, 1.0], constituents=[0])
        assert jet_a == jet_b
        assert jet_a != jet_c

    def test_jet_independent_defaults(self):
        """Test that default arrays are not shared between instances."""
        jet_a, jet_b = Jet(), Jet()
        jet_a.momentum[0] = 1.0
        assert jet_b.momentum[0] == -np.inf


class TestInputs:
    """Test the event input data classes."""

    def test_kinds(self):
        """Test that each input class carries its kind tag."""
        assert PFCandidate().kind is InputKind.PF_CANDIDATE
        assert MCParticle().kind is InputKind.MC_PARTICLE
        assert PFJet().kind is InputKind.PF_JET

    def test_event_defaults(self):
        """Test the default event inputs."""
        inputs = EventInputs()
        assert inputs.jets == []
        assert inputs.candidates == []
        assert inputs.trigger_objects is None
        assert inputs.mc_particles is None
        assert inputs.is_data

    def test_trigger_object(self):
        """Test that binary trigger names are decoded."""
        obj = TriggerObject(b"hltMonoCentralPFJet80", 0.5, -1.0)
        assert obj.name == "hltMonoCentralPFJet80"
        assert np.allclose(obj.direction, [0.5, -1.0])

    def test_particle(self):
        """Test the clustering input particle and momentum stacking."""
        part = Particle(0.0, 2.0, 0.0, 2.0, index=4)
        assert part.index == 4
        assert part.pt == pytest.approx(2.0)
        assert part.phi == pytest.approx(np.pi / 2)
        assert np.allclose(part.momentum, [0.0, 2.0, 0.0, 2.0])

        moms = to_momenta([part, Particle(1.0, 0.0, 0.0, 1.0)])
        assert moms.shape == (2, 4)
        assert to_momenta([]).shape == (0, 4)
