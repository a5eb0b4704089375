"""
Vector store clients.
"""
from .qdrant import QdrantManager, QdrantCandidateRetriever, build_filter

__all__ = [
    "QdrantManager",
    "QdrantCandidateRetriever",
    "build_filter",
]
