"""
Weight profiles: how embedding facets are combined for each search mode.
"""
import math
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from loguru import logger


class Facet(str, Enum):
    """Conceptual dimensions of visual similarity, one stored vector each."""
    HYBRID = "hybrid"
    VISUAL = "visual"
    STYLE = "style"
    SEMANTIC = "semantic"
    COLOR = "color"


class SearchMode(str, Enum):
    BALANCED = "balanced"
    VISUAL = "visual"
    SEMANTIC = "semantic"
    STYLE = "style"
    COLOR = "color"


DEFAULT_MODE = SearchMode.BALANCED
WEIGHT_TOLERANCE = 1e-6


class WeightProfile:
    """
    Immutable mapping from facet to non-negative weight.

    Weights always sum to 1.0 (within WEIGHT_TOLERANCE).
    """

    __slots__ = ("mode", "_weights")

    def __init__(self, mode: SearchMode, weights: Mapping[Facet, float]):
        if any(w < 0 for w in weights.values()):
            raise ValueError(f"Negative facet weight in profile '{mode.value}'")
        total = math.fsum(weights.values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Weights of profile '{mode.value}' sum to {total}, expected 1.0")

        self.mode = mode
        self._weights = MappingProxyType({facet: float(weights.get(facet, 0.0)) for facet in Facet})

    @property
    def weights(self) -> Mapping[Facet, float]:
        return self._weights

    def weight(self, facet: Facet) -> float:
        return self._weights[facet]

    def as_dict(self) -> Dict[str, float]:
        """Facet weights keyed by facet name."""
        return {facet.value: weight for facet, weight in self._weights.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightProfile):
            return NotImplemented
        return self.mode == other.mode and dict(self._weights) == dict(other._weights)

    def __hash__(self) -> int:
        return hash((self.mode, tuple(self._weights.items())))

    def __repr__(self) -> str:
        return f"WeightProfile(mode={self.mode.value!r}, weights={self.as_dict()!r})"


def _profile(mode: SearchMode, hybrid: float, visual: float, style: float,
             semantic: float, color: float) -> WeightProfile:
    return WeightProfile(
        mode,
        {
            Facet.HYBRID: hybrid,
            Facet.VISUAL: visual,
            Facet.STYLE: style,
            Facet.SEMANTIC: semantic,
            Facet.COLOR: color,
        },
    )


# Built once at import; adding a mode is a data change here only.
WEIGHT_PROFILES: Mapping[SearchMode, WeightProfile] = MappingProxyType({
    SearchMode.BALANCED: _profile(SearchMode.BALANCED, 0.40, 0.20, 0.20, 0.10, 0.10),
    SearchMode.VISUAL: _profile(SearchMode.VISUAL, 0.20, 0.60, 0.10, 0.05, 0.05),
    SearchMode.SEMANTIC: _profile(SearchMode.SEMANTIC, 0.20, 0.05, 0.15, 0.55, 0.05),
    SearchMode.STYLE: _profile(SearchMode.STYLE, 0.20, 0.10, 0.55, 0.10, 0.05),
    SearchMode.COLOR: _profile(SearchMode.COLOR, 0.20, 0.10, 0.05, 0.05, 0.60),
})


def resolve_weight_profile(mode: Optional[str] = None) -> WeightProfile:
    """
    Resolve a search mode name to its weight profile.

    Args:
        mode: Search mode name (case-insensitive). None, empty or unknown
            names fall back to 'balanced'.

    Returns:
        The matching WeightProfile
    """
    if mode is None:
        return WEIGHT_PROFILES[DEFAULT_MODE]

    key = mode.value if isinstance(mode, SearchMode) else str(mode).strip().lower()
    try:
        return WEIGHT_PROFILES[SearchMode(key)]
    except ValueError:
        if key:
            logger.debug(f"Unknown search mode '{key}', using '{DEFAULT_MODE.value}'")
        return WEIGHT_PROFILES[DEFAULT_MODE]


def list_weight_profiles() -> Dict[str, Dict[str, float]]:
    """All weight profiles keyed by mode name."""
    return {mode.value: profile.as_dict() for mode, profile in WEIGHT_PROFILES.items()}
