"""Tests for the conversion of input collections to clustering inputs."""

import pytest

from boostv.data import MCParticle, PFCandidate, PFJet
from boostv.reco import ParticleCollector
from boostv.utils.errors import EventSkip, InputTypeError, ParticleLimitExceeded


@pytest.fixture(name="candidates")
def fixture_candidates():
    """Five particle-flow candidates with increasing energy."""
    return [PFCandidate(float(i), 0.0, 0.0, float(i) + 1.0) for i in range(5)]


class TestParticleCollector:
    """Test the particle collector."""

    def test_invalid_parameters(self):
        """Test that nonsensical limits are rejected."""
        with pytest.raises(ValueError):
            ParticleCollector(max_jets=0)
        with pytest.raises(ValueError):
            ParticleCollector(max_particles=-1)

    def test_from_candidates(self, candidates):
        """Test that candidates are converted in order with their index."""
        parts = ParticleCollector().from_candidates(candidates)
        assert len(parts) == 5
        assert [p.index for p in parts] == list(range(5))
        assert [p.e for p in parts] == [c.e for c in candidates]

    def test_from_candidates_empty(self):
        """Test that an empty collection gives no particle."""
        assert ParticleCollector().from_candidates([]) == []

    def test_wrong_kind(self, candidates):
        """Test that a single foreign element invalidates the collection."""
        collection = candidates + [MCParticle(1.0, 0.0, 0.0, 1.0, status=1)]
        with pytest.raises(InputTypeError) as err:
            ParticleCollector().from_candidates(collection)

        assert isinstance(err.value, EventSkip)
        assert err.value.reason == "input_type"

        with pytest.raises(InputTypeError):
            ParticleCollector().from_candidates([(1.0, 0.0, 0.0, 1.0)])

    def test_from_jets(self, candidates):
        """Test that only the constituents of the leading jets are used."""
        jets = [
            PFJet(0.0, 0.0, 0.0, 0.0, candidates=candidates[:2]),
            PFJet(0.0, 0.0, 0.0, 0.0, candidates=candidates[2:]),
        ]
        parts = ParticleCollector(max_jets=1).from_jets(jets)
        assert [p.e for p in parts] == [1.0, 2.0]

        parts = ParticleCollector(max_jets=2).from_jets(jets)
        assert len(parts) == 5
        assert [p.index for p in parts] == list(range(5))

        assert ParticleCollector().from_jets([]) == []

    def test_from_jets_wrong_kind(self, candidates):
        """Test that jets must be made of particle-flow candidates."""
        with pytest.raises(InputTypeError):
            ParticleCollector().from_jets(candidates)

        jets = [PFJet(candidates=[MCParticle(1.0, 0.0, 0.0, 1.0)])]
        with pytest.raises(InputTypeError):
            ParticleCollector().from_jets(jets)

    def test_from_jets_unused(self, candidates):
        """Test that jets beyond `max_jets` are not checked."""
        jets = [PFJet(0.0, 0.0, 0.0, 0.0, candidates=candidates), candidates[0]]
        parts = ParticleCollector(max_jets=1).from_jets(jets)
        assert len(parts) == 5

        with pytest.raises(InputTypeError):
            ParticleCollector(max_jets=2).from_jets(jets)

    def test_from_generator(self):
        """Test that only stable generator particles are kept."""
        particles = [
            MCParticle(1.0, 0.0, 0.0, 1.0, status=1),
            MCParticle(2.0, 0.0, 0.0, 2.0, status=2),
            MCParticle(3.0, 0.0, 0.0, 3.0, status=1),
            MCParticle(4.0, 0.0, 0.0, 4.0, status=3),
        ]
        parts = ParticleCollector().from_generator(particles)
        assert [p.index for p in parts] == [0, 2]
        assert [p.e for p in parts] == [1.0, 3.0]

    def test_particle_limit(self, candidates):
        """Test the particle count cap."""
        collector = ParticleCollector(max_particles=5)
        assert len(collector.from_candidates(candidates)) == 5

        collector = ParticleCollector(max_particles=4)
        with pytest.raises(ParticleLimitExceeded) as err:
            collector.from_candidates(candidates)
        assert err.value.reason == "particle_limit"
