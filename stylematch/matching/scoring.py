"""
Distance to match-score calibration.

Raw cosine distance means little to an end user, so every candidate is mapped
onto a 0-100 match score. Only `max_distance` (linear) needs recalibrating
when the embedding model changes.
"""
import math
from typing import Callable, Dict

DEFAULT_MAX_DISTANCE = 1.0

# (similarity floor, score at floor, score gained per unit of similarity)
_PERCEPTUAL_BANDS = (
    (0.98, 95.0, 250.0),  # nearly identical
    (0.90, 85.0, 125.0),  # very similar
    (0.80, 70.0, 150.0),  # similar
    (0.70, 55.0, 150.0),  # somewhat similar
    (0.60, 40.0, 150.0),  # loosely related
)
_LOW_MATCH_SLOPE = 66.7


def _check_distance(distance: float) -> float:
    if isinstance(distance, bool) or not isinstance(distance, (int, float)):
        raise ValueError(f"Distance must be a number, got {type(distance).__name__}")
    distance = float(distance)
    if math.isnan(distance) or distance < 0:
        raise ValueError(f"Invalid cosine distance: {distance}")
    return distance


def _clamp_score(raw: float) -> int:
    return int(min(100, max(0, round(raw))))


def linear_score(distance: float, max_distance: float = DEFAULT_MAX_DISTANCE) -> int:
    """
    Linear calibration: 100 at distance 0, 0 at `max_distance` and beyond.

    Args:
        distance: Cosine distance (>= 0)
        max_distance: Distance that maps to a score of 0

    Returns:
        Match score in [0, 100]
    """
    distance = _check_distance(distance)
    if max_distance <= 0:
        raise ValueError(f"max_distance must be positive, got {max_distance}")
    return _clamp_score(max(0.0, 100.0 * (1.0 - distance / max_distance)))


def perceptual_score(distance: float, max_distance: float = DEFAULT_MAX_DISTANCE) -> int:
    """
    Piecewise calibration that spreads high similarities further apart.

    Works on cosine similarity (1 - distance). `max_distance` is accepted for
    signature compatibility and ignored.
    """
    similarity = 1.0 - _check_distance(distance)
    for floor, base, slope in _PERCEPTUAL_BANDS:
        if similarity >= floor:
            return _clamp_score(base + (similarity - floor) * slope)
    return _clamp_score(max(0.0, similarity * _LOW_MATCH_SLOPE))


CALIBRATIONS: Dict[str, Callable[[float, float], int]] = {
    "linear": linear_score,
    "perceptual": perceptual_score,
}


def score_distance(
    distance: float,
    max_distance: float = DEFAULT_MAX_DISTANCE,
    calibration: str = "linear",
) -> int:
    """
    Convert cosine distance into a match score.

    Pure and monotonically non-increasing in distance: equal distances always
    give equal scores.

    Args:
        distance: Cosine distance in [0, 2]
        max_distance: Distance mapped to 0 by the linear calibration
        calibration: 'linear' or 'perceptual'

    Returns:
        Match score in [0, 100]

    Raises:
        ValueError: If distance is negative/NaN or calibration is unknown
    """
    try:
        transform = CALIBRATIONS[calibration]
    except KeyError:
        raise ValueError(f"Unknown score calibration: {calibration}") from None
    return transform(distance, max_distance)
