"""
Candidate retrieval interface.

Scoring and re-ranking depend only on this interface, never on the query
language of a particular vector store.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from stylematch.matching.weights import WeightProfile
from stylematch.schemas.match import Candidate, RetrievalFilters


class CandidateRetriever(ABC):
    """Nearest-neighbour lookup of service media against a query embedding."""

    name: str = "base"

    @abstractmethod
    async def retrieve(
        self,
        embedding: Sequence[float],
        filters: RetrievalFilters,
        limit: int,
        facet_embeddings: Optional[Dict[str, Sequence[float]]] = None,
        profile: Optional[WeightProfile] = None,
    ) -> List[Candidate]:
        """
        Return at most `limit` candidates ordered by ascending distance.

        When `facet_embeddings` and `profile` are given, `distance` is the
        weighted fusion of per-facet distances.

        Raises:
            RetrievalError: If the store is unreachable or the query fails
        """

    async def ping(self) -> Dict[str, object]:
        """Backend status for health checks."""
        return {"backend": self.name}

    def close(self) -> None:
        """Release backend resources."""
