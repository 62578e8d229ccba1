"""Tests for the boostv.math.cluster recombination kernel."""

import numpy as np
import pytest

from boostv.math import eta, from_pt_eta_phi_m, phi, pt
from boostv.math.cluster import ALGORITHMS, assign_leaves, leaves, recombine


def build(pts, etas, phis):
    """Builds massless four-momenta from (pt, eta, phi) lists."""
    pts = np.asarray(pts, dtype=np.float64)
    return from_pt_eta_phi_m(
        pts, np.asarray(etas, float), np.asarray(phis, float), np.zeros(len(pts))
    )


class TestRecombine:
    """Test the generalized-kt sequential recombination kernel."""

    def test_empty(self):
        """Test that an empty input produces an empty history."""
        nodes, parents, finals = recombine(np.empty((0, 4)), 0.8)
        assert len(nodes) == 0
        assert len(parents) == 0
        assert len(finals) == 0

    def test_single(self):
        """Test that a single particle is its own jet."""
        mom = build([50.0], [0.5], [1.0])
        nodes, parents, finals = recombine(mom, 0.8)
        assert len(nodes) == 1
        assert np.all(parents == -1)
        assert list(finals) == [0]

    @pytest.mark.parametrize("algorithm", list(ALGORITHMS.keys()))
    def test_history(self, algorithm):
        """Test that the history is a set of binary trees over the inputs."""
        rng = np.random.default_rng(seed=0)
        num = 30
        mom = build(
            rng.uniform(1.0, 50.0, num),
            rng.uniform(-2.0, 2.0, num),
            rng.uniform(-np.pi, np.pi, num),
        )
        nodes, parents, finals = recombine(mom, 0.6, ALGORITHMS[algorithm])

        # Every merge adds one node, every jet removes one active node
        assert len(nodes) == num + (num - len(finals))
        assert np.all(parents[:num] == -1)
        assert np.all(parents[num:] >= 0)

        # Every leaf belongs to exactly one final jet
        index = np.concatenate([leaves(parents, f) for f in finals])
        assert np.array_equal(np.sort(index), np.arange(num))

        # Node four-momenta are E-scheme sums of their leaves
        for f in finals:
            assert np.allclose(nodes[f], mom[leaves(parents, f)].sum(axis=0))

    def test_beam_boundary(self):
        """Test that a pair exactly at the radius is not merged."""
        # Along x and along y, exactly pi/2 apart in azimuth
        mom = np.array([[10.0, 0.0, 0.0, 10.0], [0.0, 10.0, 0.0, 10.0]])
        radius = phi(mom[1])
        _, _, finals = recombine(mom, radius)
        assert len(finals) == 2

        _, _, finals = recombine(mom, radius + 1e-9)
        assert len(finals) == 1

    def test_cambridge_order(self):
        """Test that C/A merges the geometrically closest pair first."""
        mom = build([100.0, 1.0, 1.0], [0.0, 0.5, 0.55], [0.0, 0.0, 0.0])
        _, parents, finals = recombine(mom, 1.0, ALGORITHMS["cambridge"])
        assert len(finals) == 1
        assert sorted(parents[3]) == [1, 2]

    def test_kt_order(self):
        """Test that kt merges the softest pair first."""
        mom = build([100.0, 1.0, 1.0], [0.0, 0.1, 0.5], [0.0, 0.0, 0.0])
        _, parents, _ = recombine(mom, 1.0, ALGORITHMS["kt"])
        assert sorted(parents[3]) == [0, 1]

        mom = build([100.0, 1.0, 1.0], [0.0, 0.3, 0.5], [0.0, 0.0, 0.0])
        _, parents, _ = recombine(mom, 1.0, ALGORITHMS["kt"])
        assert sorted(parents[3]) == [1, 2]

    def test_exclusive(self):
        """Test that exclusive mode stops at the requested number of nodes."""
        mom = build(
            [10.0, 12.0, 8.0, 11.0], [0.0, 0.02, 3.0, 3.02], [0.0, 0.01, 2.0, 2.0]
        )
        nodes, parents, finals = recombine(mom, 1000.0, 1.0, 2)
        assert len(finals) == 2
        groups = sorted(tuple(leaves(parents, f)) for f in finals)
        assert groups == [(0, 1), (2, 3)]

        for f in finals:
            assert pt(nodes[f]) > 0.0
            assert np.isfinite(eta(nodes[f])) and np.isfinite(phi(nodes[f]))

    def test_exclusive_all(self):
        """Test that asking for as many nodes as inputs returns the inputs."""
        mom = build([1.0, 2.0, 3.0], [0.0, 0.1, 0.2], [0.0, 0.0, 0.0])
        nodes, _, finals = recombine(mom, 1000.0, 1.0, 3)
        assert len(nodes) == 3
        assert sorted(finals) == [0, 1, 2]

    @pytest.mark.parametrize("algorithm", list(ALGORITHMS.keys()))
    @pytest.mark.parametrize("radius", [0.4, 1.0, 2.5])
    def test_tiled(self, algorithm, radius):
        """Test that the cell grid does not change the clustering."""
        rng = np.random.default_rng(seed=2)
        num = 300
        mom = build(
            rng.uniform(0.1, 50.0, num),
            rng.uniform(-4.0, 4.0, num),
            rng.uniform(-np.pi, np.pi, num),
        )

        groups = []
        for tiled in (True, False):
            _, parents, finals = recombine(
                mom, radius, ALGORITHMS[algorithm], -1, tiled
            )
            groups.append(sorted(tuple(leaves(parents, f)) for f in finals))

        assert groups[0] == groups[1]

    def test_assign_leaves(self):
        """Test that every leaf is labeled with the final node above it."""
        mom = build([10.0, 5.0, 8.0, 1.0], [0.0, 0.1, 2.0, 2.1], [0.0, 0.0, 1.0, 1.0])
        _, parents, finals = recombine(mom, 0.5)
        labels = assign_leaves(parents, finals, len(mom))

        assert len(finals) == 2
        for i, f in enumerate(finals):
            assert np.array_equal(np.flatnonzero(labels == i), leaves(parents, f))
