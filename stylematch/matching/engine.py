"""
Matching engine: validates a search request, retrieves candidates, scores,
explains and re-ranks them.
"""
import asyncio
import math
import time
from typing import Dict, List, Optional, Sequence

from loguru import logger

from stylematch.config import settings
from stylematch.exceptions import RetrievalError, ValidationError
from stylematch.matching.rerank import rerank
from stylematch.matching.retriever import CandidateRetriever
from stylematch.matching.scoring import score_distance
from stylematch.matching.tags import matching_tags
from stylematch.matching.weights import Facet, resolve_weight_profile
from stylematch.schemas.match import (
    Candidate,
    RankedMatch,
    RetrievalFilters,
    SearchRequest,
    SearchResult,
)
from stylematch.utils.metrics import record_match_scores, record_retrieval


def _check_vector(vector: Sequence[float], expected_size: int, field: str) -> None:
    if len(vector) != expected_size:
        raise ValidationError(
            f"{field} must have {expected_size} dimensions, got {len(vector)}",
            field=field,
        )
    if not all(math.isfinite(v) for v in vector):
        raise ValidationError(f"{field} contains non-finite values", field=field)
    if not any(vector):
        raise ValidationError(f"{field} must not be a zero vector", field=field)


class MatchingEngine:
    """
    Stateless search pipeline over a candidate retriever.

    One instance is shared by all requests; nothing is mutated per search.
    Tunables default to the application settings.
    """

    def __init__(
        self,
        retriever: CandidateRetriever,
        embedding_dimension: Optional[int] = None,
        facet_vector_sizes: Optional[Dict[str, int]] = None,
        max_results_limit: Optional[int] = None,
        candidate_pool_factor: Optional[int] = None,
        max_distance: Optional[float] = None,
        calibration: Optional[str] = None,
        min_score: Optional[int] = None,
        diversify: Optional[bool] = None,
        provider_cap: Optional[int] = None,
        diversity_window: Optional[int] = None,
        retrieval_timeout: Optional[float] = None,
    ):
        self.retriever = retriever
        self.embedding_dimension = embedding_dimension or settings.embedding_dimension
        self.facet_vector_sizes = facet_vector_sizes or settings.facet_vector_sizes
        self.max_results_limit = max_results_limit or settings.max_search_limit
        self.candidate_pool_factor = candidate_pool_factor or settings.candidate_pool_factor
        self.max_distance = max_distance or settings.score_max_distance
        self.calibration = calibration or settings.score_calibration
        self.min_score = settings.min_match_score if min_score is None else min_score
        self.diversify = settings.diversify_results if diversify is None else diversify
        self.provider_cap = provider_cap or settings.diversity_provider_cap
        self.diversity_window = settings.diversity_window if diversity_window is None else diversity_window
        self.retrieval_timeout = retrieval_timeout or settings.retrieval_timeout

    def validate_request(self, request: SearchRequest) -> None:
        """
        Reject malformed requests before any retrieval.

        Raises:
            ValidationError: On a bad embedding, result limit or facet vector
        """
        _check_vector(request.embedding, self.embedding_dimension, "embedding")

        if not 1 <= request.max_results <= self.max_results_limit:
            raise ValidationError(
                f"max_results must be between 1 and {self.max_results_limit}, got {request.max_results}",
                field="max_results",
            )

        for name, vector in (request.facet_embeddings or {}).items():
            field = f"facet_embeddings.{name}"
            try:
                facet = Facet(name)
            except ValueError:
                raise ValidationError(f"Unknown facet: {name}", field=field) from None
            if facet.value not in self.facet_vector_sizes:
                raise ValidationError(f"Facet '{name}' is not stored in this deployment", field=field)
            _check_vector(vector, self.facet_vector_sizes[facet.value], field)

    def score_candidates(self, candidates: List[Candidate], query_tags: Sequence[str]) -> List[RankedMatch]:
        """Attach match score and matching tags to each candidate, keeping order."""
        return [
            RankedMatch(
                **dict(candidate),
                match_score=score_distance(candidate.distance, self.max_distance, self.calibration),
                matching_tags=matching_tags(query_tags, candidate.tags),
            )
            for candidate in candidates
        ]

    async def search(self, request: SearchRequest) -> SearchResult:
        """
        Run one visual similarity search.

        Args:
            request: Search request

        Returns:
            Ranked matches; an empty list is a normal outcome

        Raises:
            ValidationError: Malformed request (no retrieval performed)
            RetrievalError: Vector store unavailable, failed or timed out
        """
        start_time = time.perf_counter()
        self.validate_request(request)

        profile = resolve_weight_profile(request.search_mode)
        location = request.location
        filters = RetrievalFilters(
            city=location.city if location else None,
            state=location.state if location else None,
            category=request.category,
        )
        limit = request.max_results * self.candidate_pool_factor

        logger.info(
            f"Match search: mode={profile.mode.value}, dim={len(request.embedding)}, "
            f"tags={len(request.tags)}, filters={filters.describe()}, limit={limit}"
        )

        retrieval_start = time.perf_counter()
        try:
            candidates = await asyncio.wait_for(
                self.retriever.retrieve(
                    request.embedding,
                    filters,
                    limit,
                    facet_embeddings=request.facet_embeddings,
                    profile=profile,
                ),
                timeout=self.retrieval_timeout,
            )
        except asyncio.TimeoutError as e:
            query_shape = {"dimension": len(request.embedding), "limit": limit, "filters": filters.describe()}
            logger.error(f"❌ Candidate retrieval timed out after {self.retrieval_timeout}s (query={query_shape})")
            raise RetrievalError(
                f"Vector store did not answer within {self.retrieval_timeout}s",
                query_shape=query_shape,
            ) from e
        record_retrieval(time.perf_counter() - retrieval_start, len(candidates))

        scored = self.score_candidates(candidates, request.tags)
        ranked = rerank(
            scored,
            min_score=self.min_score if request.min_score is None else request.min_score,
            diversify=self.diversify if request.diversify is None else request.diversify,
            provider_cap=self.provider_cap,
            window=self.diversity_window,
        )
        matches = ranked[:request.max_results]
        record_match_scores([m.match_score for m in matches])

        query_time_ms = int((time.perf_counter() - start_time) * 1000)
        if matches:
            top = matches[0]
            logger.debug(
                f"Top match: media={top.media_id}, provider={top.provider_id}, "
                f"distance={top.distance:.4f}, score={top.match_score}, tags={top.matching_tags[:5]}"
            )
        logger.info(
            f"Match search completed: {len(candidates)} candidates, {len(ranked)} above threshold, "
            f"{len(matches)} returned in {query_time_ms}ms"
        )

        return SearchResult(
            message="Matches found" if matches else "No matches found",
            search_mode=profile.mode.value,
            weights=profile.as_dict(),
            query_time_ms=query_time_ms,
            total_matches=len(ranked),
            matches=matches,
        )
