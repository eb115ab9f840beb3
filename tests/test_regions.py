"""Tests for illustrative region synthesis."""

import random

import numpy as np
import pytest

from gallery_anomaly.models import Severity
from gallery_anomaly.regions import synthesize_regions, severity_for_score


class FixedRng:
    """Random source that always returns the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestSynthesizeRegions:
    """Tests for region count, severity, and placement."""

    @pytest.mark.parametrize("score", [-1.0, 0.0, 0.3])
    def test_no_regions_at_or_below_threshold(self, score):
        assert synthesize_regions(score) == []

    def test_score_035_gives_two_low_regions(self):
        regions = synthesize_regions(0.35, rng=random.Random(0))
        assert len(regions) == 2
        assert all(r.severity is Severity.LOW for r in regions)

    def test_score_06_gives_two_medium_regions(self):
        regions = synthesize_regions(0.6, rng=random.Random(0))
        assert len(regions) == 2
        assert all(r.severity is Severity.MEDIUM for r in regions)

    def test_score_075_gives_three_high_regions(self):
        regions = synthesize_regions(0.75, rng=random.Random(0))
        assert len(regions) == 3
        assert all(r.severity is Severity.HIGH for r in regions)

    def test_values_within_ranges(self):
        regions = synthesize_regions(0.95, rng=random.Random(123))
        for r in regions:
            assert 0.1 <= r.x < 0.7
            assert 0.1 <= r.y < 0.7
            assert 0.15 <= r.width < 0.35
            assert 0.15 <= r.height < 0.35
            assert 0.95 * 0.7 <= r.score < 0.95

    def test_exact_placement_with_fixed_rng(self):
        (region,) = synthesize_regions(0.32, rng=FixedRng(0.5))
        assert region.x == pytest.approx(0.4)
        assert region.y == pytest.approx(0.4)
        assert region.width == pytest.approx(0.25)
        assert region.height == pytest.approx(0.25)
        assert region.score == pytest.approx(0.32 * 0.85)

    def test_seeded_rng_reproducible(self):
        first = synthesize_regions(0.8, rng=random.Random(7))
        second = synthesize_regions(0.8, rng=random.Random(7))
        assert first == second

    def test_numpy_generator_accepted(self):
        regions = synthesize_regions(0.5, rng=np.random.default_rng(0))
        assert len(regions) == 2

    def test_unseeded_default(self):
        assert len(synthesize_regions(1.0)) == 3


class TestSeverityForScore:

    @pytest.mark.parametrize("score,expected", [
        (0.31, Severity.LOW),
        (0.5, Severity.LOW),
        (0.51, Severity.MEDIUM),
        (0.7, Severity.MEDIUM),
        (0.71, Severity.HIGH),
    ])
    def test_tiers(self, score, expected):
        assert severity_for_score(score) is expected
