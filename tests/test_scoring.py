"""
Tests for distance to match-score calibration.
"""
import pytest

from stylematch.matching.scoring import (
    linear_score,
    perceptual_score,
    score_distance,
)

# 0.0 .. 2.0 in steps of 0.01
DISTANCES = [i / 100 for i in range(0, 201)]


class TestLinearScore:
    """Tests for the default linear calibration."""

    def test_example_scenario(self):
        """Distances [0.0, 0.3, 0.3, 0.9, 1.5] score [100, 70, 70, 10, 0]."""
        scores = [score_distance(d) for d in [0.0, 0.3, 0.3, 0.9, 1.5]]

        assert scores == [100, 70, 70, 10, 0]

    def test_saturates_at_100(self):
        assert score_distance(0.0) == 100
        assert score_distance(0.004) == 100

    def test_zero_beyond_max_distance(self):
        assert score_distance(1.0) == 0
        assert score_distance(2.0) == 0

    def test_custom_max_distance(self):
        assert score_distance(0.5, max_distance=2.0) == 75
        assert score_distance(0.3, max_distance=0.6) == 50

    def test_rejects_non_positive_max_distance(self):
        with pytest.raises(ValueError):
            linear_score(0.1, max_distance=0.0)


class TestScoreProperties:
    """Monotonicity and boundedness for every calibration."""

    @pytest.mark.parametrize("calibration", ["linear", "perceptual"])
    def test_monotonic_non_increasing(self, calibration):
        scores = [score_distance(d, calibration=calibration) for d in DISTANCES]

        assert all(a >= b for a, b in zip(scores, scores[1:]))

    @pytest.mark.parametrize("calibration", ["linear", "perceptual"])
    def test_bounded(self, calibration):
        for d in DISTANCES:
            assert 0 <= score_distance(d, calibration=calibration) <= 100

    @pytest.mark.parametrize("calibration", ["linear", "perceptual"])
    def test_equal_distance_equal_score(self, calibration):
        assert score_distance(0.37, calibration=calibration) == score_distance(0.37, calibration=calibration)

    def test_returns_int(self):
        assert isinstance(score_distance(0.25), int)
        assert isinstance(score_distance(0.25, calibration="perceptual"), int)


class TestPerceptualScore:
    """Tests for the piecewise perceptual calibration."""

    @pytest.mark.parametrize(
        "distance,expected",
        [
            (0.0, 100),   # identical
            (0.02, 95),   # similarity 0.98
            (0.10, 85),   # similarity 0.90
            (0.20, 70),   # similarity 0.80
            (0.30, 55),   # similarity 0.70
            (0.40, 40),   # similarity 0.60
            (0.70, 20),   # similarity 0.30 -> 0.3 * 66.7
            (1.50, 0),    # negative similarity
        ],
    )
    def test_band_edges(self, distance, expected):
        assert perceptual_score(distance) == expected

    def test_spreads_close_matches(self):
        """Near-duplicates are separated more than with the linear curve."""
        assert perceptual_score(0.01) - perceptual_score(0.05) > linear_score(0.01) - linear_score(0.05)


class TestInvalidInput:
    """Malformed distances fail loudly."""

    @pytest.mark.parametrize("distance", [-0.1, float("nan")])
    def test_rejects_invalid_distance(self, distance):
        with pytest.raises(ValueError):
            score_distance(distance)

    @pytest.mark.parametrize("distance", [None, "0.3", True])
    def test_rejects_non_numeric(self, distance):
        with pytest.raises(ValueError):
            score_distance(distance)

    def test_rejects_unknown_calibration(self):
        with pytest.raises(ValueError, match="Unknown score calibration"):
            score_distance(0.2, calibration="sigmoid")
