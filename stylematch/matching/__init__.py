"""
Visual similarity matching: weight profiles, scoring, tag overlap, re-ranking.
"""
from .weights import (
    Facet,
    SearchMode,
    WeightProfile,
    WEIGHT_PROFILES,
    resolve_weight_profile,
    list_weight_profiles,
)
from .scoring import score_distance
from .tags import matching_tags
from .rerank import rerank
from .retriever import CandidateRetriever
from .engine import MatchingEngine

__all__ = [
    # Weight profiles
    "Facet",
    "SearchMode",
    "WeightProfile",
    "WEIGHT_PROFILES",
    "resolve_weight_profile",
    "list_weight_profiles",
    # Pipeline stages
    "score_distance",
    "matching_tags",
    "rerank",
    "CandidateRetriever",
    "MatchingEngine",
]
