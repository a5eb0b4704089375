"""
Schemas for visual similarity matching.
"""
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from typing import Dict, List, Optional
from decimal import Decimal

from stylematch.config import settings


class LocationFilter(BaseModel):
    """Exact-match location restriction on the provider."""
    city: Optional[str] = Field(None, min_length=1, description="Provider city")
    state: Optional[str] = Field(None, min_length=1, description="Provider state/region")


class RetrievalFilters(BaseModel):
    """Attribute filters applied by the vector store before ranking."""
    model_config = ConfigDict(frozen=True)

    active_only: bool = Field(default=True, description="Only active services of completed profiles")
    city: Optional[str] = Field(None, description="Provider city (exact match)")
    state: Optional[str] = Field(None, description="Provider state (exact match)")
    category: Optional[str] = Field(None, description="Service category (exact match)")

    def describe(self) -> List[str]:
        """Names of the active filter predicates, safe to log."""
        names = ["active_only"] if self.active_only else []
        names.extend(
            name for name in ("city", "state", "category")
            if getattr(self, name) is not None
        )
        return names


class Candidate(BaseModel):
    """One service-media record returned by the vector store."""
    model_config = ConfigDict(frozen=True)

    media_id: str = Field(..., description="Service media ID")
    media_url: str = Field(..., description="Media file URL")
    thumbnail_url: Optional[str] = Field(None, description="Thumbnail URL")
    service_id: str = Field(..., description="Parent service ID")
    service_title: str = Field(..., description="Service title")
    price: Decimal = Field(..., description="Minimum service price")
    currency: str = Field(..., description="Currency code")
    category: Optional[str] = Field(None, description="Service category")
    provider_id: str = Field(..., description="Provider ID")
    provider_name: str = Field(..., description="Provider business name")
    provider_slug: Optional[str] = Field(None, description="Provider profile slug")
    provider_logo_url: Optional[str] = Field(None, description="Provider logo URL")
    city: Optional[str] = Field(None, description="Provider city")
    state: Optional[str] = Field(None, description="Provider state")
    tags: List[str] = Field(default_factory=list, description="AI tags of the media")
    description: Optional[str] = Field(None, description="AI description of the media")
    distance: float = Field(..., ge=0.0, le=2.0, description="Cosine distance to the query")
    facet_distances: Dict[str, float] = Field(
        default_factory=dict,
        description="Per-facet cosine distances when multi-vector fusion was used"
    )

    @field_serializer('price')
    def serialize_price(self, price: Decimal, _info):
        return float(price)


class RankedMatch(Candidate):
    """Candidate enriched with its match score, explanation and rank."""
    match_score: int = Field(..., ge=0, le=100, description="Match score (0-100)")
    matching_tags: List[str] = Field(default_factory=list, description="Tags shared with the query")
    rank: int = Field(default=0, ge=0, description="1-based position in the final list")


class SearchRequest(BaseModel):
    """Запрос поиска похожих работ мастеров."""
    embedding: List[float] = Field(..., min_length=1, description="Query embedding (hybrid facet)")
    tags: List[str] = Field(default_factory=list, description="Tags extracted from the query image")
    location: Optional[LocationFilter] = Field(None, description="Provider location filter")
    category: Optional[str] = Field(None, description="Service category filter")
    max_results: int = Field(
        default_factory=lambda: settings.default_search_limit,
        ge=1,
        description="Maximum number of results (upper bound is settings.max_search_limit)"
    )
    search_mode: Optional[str] = Field(default="balanced", description="Weight profile name")
    min_score: Optional[int] = Field(None, description="Minimum match score override")
    diversify: Optional[bool] = Field(None, description="Provider diversity override")
    facet_embeddings: Optional[Dict[str, List[float]]] = Field(
        None,
        description="Optional per-facet query vectors for multi-vector fusion"
    )


class SearchResult(BaseModel):
    """Ответ API поиска совпадений."""
    message: str = Field(..., description="Human readable outcome")
    search_mode: str = Field(..., description="Resolved weight profile name")
    weights: Dict[str, float] = Field(..., description="Resolved facet weights")
    query_time_ms: int = Field(..., description="Query execution time in milliseconds")
    total_matches: int = Field(..., description="Number of matches above the score threshold")
    matches: List[RankedMatch] = Field(default=[], description="Ranked matches")


class WeightProfileInfo(BaseModel):
    """Описание профиля весов."""
    mode: str = Field(..., description="Search mode name")
    weights: Dict[str, float] = Field(..., description="Facet weights (sum to 1.0)")
