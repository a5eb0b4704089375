"""
Qdrant vector database module: service media collection and candidate retrieval.
"""
import asyncio
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid5, NAMESPACE_DNS

import httpx
from loguru import logger
from qdrant_client import QdrantClient as QdrantClientSDK
from qdrant_client.http.exceptions import ResponseHandlingException
from qdrant_client.models import (
    Distance,
    VectorParams,
    PointStruct,
    ScoredPoint,
    Filter,
    FieldCondition,
    MatchValue,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stylematch.config import settings
from stylematch.exceptions import RetrievalError
from stylematch.matching.fusion import cosine_distance, fuse_distances
from stylematch.matching.retriever import CandidateRetriever
from stylematch.matching.weights import Facet, WeightProfile, resolve_weight_profile
from stylematch.schemas.match import Candidate, RetrievalFilters

PRIMARY_VECTOR = Facet.HYBRID.value

# Errors worth another attempt; anything else fails the query immediately.
TRANSIENT_ERRORS = (ResponseHandlingException, httpx.TransportError)


def _media_id_to_uuid(media_id: str) -> str:
    """
    Convert media_id string to UUID string.

    Args:
        media_id: Service media ID

    Returns:
        UUID string
    """
    return str(uuid5(NAMESPACE_DNS, media_id))


def build_filter(filters: RetrievalFilters) -> Optional[Filter]:
    """
    Translate retrieval filters into a Qdrant payload filter.

    Args:
        filters: Retrieval filters

    Returns:
        Qdrant Filter, or None when nothing is filtered
    """
    conditions = []
    if filters.active_only:
        conditions.append(FieldCondition(key="is_active", match=MatchValue(value=True)))
    if filters.city is not None:
        conditions.append(FieldCondition(key="provider_city", match=MatchValue(value=filters.city)))
    if filters.state is not None:
        conditions.append(FieldCondition(key="provider_state", match=MatchValue(value=filters.state)))
    if filters.category is not None:
        conditions.append(FieldCondition(key="category", match=MatchValue(value=filters.category)))

    return Filter(must=conditions) if conditions else None


def similarity_to_distance(score: float) -> float:
    """Qdrant reports cosine similarity; convert it to cosine distance in [0, 2]."""
    return min(2.0, max(0.0, 1.0 - float(score)))


def candidate_from_payload(
    payload: Dict[str, Any],
    distance: float,
    facet_distances: Optional[Dict[str, float]] = None,
) -> Candidate:
    """
    Build a Candidate from a stored point payload.

    Missing identifiers raise (KeyError or pydantic validation error): a
    broken payload is a data-integrity bug, not something to paper over.
    """
    return Candidate(
        media_id=payload["media_id"],
        media_url=payload["media_url"],
        thumbnail_url=payload.get("thumbnail_url"),
        service_id=payload["service_id"],
        service_title=payload["service_title"],
        price=payload["price"],
        currency=payload["currency"],
        category=payload.get("category"),
        provider_id=payload["provider_id"],
        provider_name=payload["provider_name"],
        provider_slug=payload.get("provider_slug"),
        provider_logo_url=payload.get("provider_logo_url"),
        city=payload.get("provider_city"),
        state=payload.get("provider_state"),
        tags=payload.get("tags") or [],
        description=payload.get("description"),
        distance=distance,
        facet_distances=facet_distances or {},
    )


class QdrantManager:
    """
    Manager class for Qdrant vector database operations.

    Handles the service media collection: one named cosine vector per facet,
    payload with the display attributes of the media, its service and provider.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        collection_name: Optional[str] = None,
        location: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize Qdrant manager.

        Args:
            host: Qdrant server host (defaults to settings)
            port: Qdrant server port (defaults to settings)
            collection_name: Name of the collection (defaults to settings)
            location: Local mode location such as ':memory:' (defaults to settings)
            timeout: Client request timeout in seconds (defaults to settings)
        """
        self.host = host or settings.qdrant_host
        self.port = port or settings.qdrant_port
        self.location = location or settings.qdrant_location
        self.collection_name = collection_name or settings.qdrant_collection_name
        self.timeout = timeout or settings.qdrant_timeout

        try:
            if self.location:
                self.client = QdrantClientSDK(location=self.location)
                logger.info(f"✅ Opened local Qdrant: {self.location}")
            else:
                self.client = QdrantClientSDK(host=self.host, port=self.port, timeout=self.timeout)
                logger.info(f"✅ Connected to Qdrant: {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"❌ Failed to connect to Qdrant: {e}")
            raise

    async def create_collection(self, vector_sizes: Optional[Dict[str, int]] = None) -> bool:
        """
        Create collection if it doesn't exist.

        Args:
            vector_sizes: Vector size per facet name (defaults to settings.facet_vector_sizes)

        Returns:
            True if collection was created or already exists
        """
        vector_sizes = vector_sizes or settings.facet_vector_sizes
        try:
            if await self.collection_exists():
                logger.info(f"Collection '{self.collection_name}' already exists")
                return True

            unknown = set(vector_sizes) - {facet.value for facet in Facet}
            if unknown:
                raise ValueError(f"Unknown facets: {sorted(unknown)}")

            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config={
                    name: VectorParams(size=size, distance=Distance.COSINE)
                    for name, size in vector_sizes.items()
                },
            )

            logger.info(f"✅ Created collection '{self.collection_name}' with vectors={vector_sizes}")
            return True

        except Exception as e:
            logger.error(f"❌ Failed to create collection '{self.collection_name}': {e}")
            raise

    async def collection_exists(self) -> bool:
        """
        Check if collection exists.

        Returns:
            True if collection exists, False otherwise
        """
        try:
            collections = self.client.get_collections().collections
            exists = any(col.name == self.collection_name for col in collections)
            logger.debug(f"Collection '{self.collection_name}' exists: {exists}")
            return exists
        except Exception as e:
            logger.error(f"❌ Failed to check collection existence: {e}")
            raise

    async def upsert_media(
        self,
        payloads: List[Dict[str, Any]],
        vectors: List[Dict[str, List[float]]],
    ) -> bool:
        """
        Add or update service media points.

        Args:
            payloads: Media payloads; each must contain 'media_id'
            vectors: Named vectors per media (at least the 'hybrid' facet)

        Returns:
            True if operation was successful

        Raises:
            ValueError: If input lists have different lengths or a vector is missing
        """
        try:
            if len(payloads) != len(vectors):
                raise ValueError(f"Length mismatch: {len(payloads)} payloads vs {len(vectors)} vectors")

            points = []
            for payload, named_vectors in zip(payloads, vectors):
                if PRIMARY_VECTOR not in named_vectors:
                    raise ValueError(f"Media '{payload.get('media_id')}' has no '{PRIMARY_VECTOR}' vector")
                payload = {"is_active": True, **payload}
                points.append(
                    PointStruct(
                        id=_media_id_to_uuid(payload["media_id"]),
                        vector={name: list(v) for name, v in named_vectors.items()},
                        payload=payload,
                    )
                )

            self.client.upsert(
                collection_name=self.collection_name,
                points=points
            )

            logger.info(f"✅ Upserted {len(points)} media points to collection '{self.collection_name}'")
            return True

        except Exception as e:
            logger.error(f"❌ Failed to upsert media: {e}")
            raise

    async def delete_media(self, media_ids: List[str]) -> bool:
        """
        Delete points by media IDs.

        Args:
            media_ids: List of media IDs to delete

        Returns:
            True if operation was successful
        """
        try:
            if not media_ids:
                logger.warning("No media IDs provided for deletion")
                return True

            self.client.delete(
                collection_name=self.collection_name,
                points_selector=[_media_id_to_uuid(mid) for mid in media_ids]
            )

            logger.info(f"✅ Deleted {len(media_ids)} media points from collection '{self.collection_name}'")
            return True

        except Exception as e:
            logger.error(f"❌ Failed to delete media: {e}")
            raise

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(settings.max_retries),
        wait=wait_exponential(multiplier=settings.retry_delay, exp_base=settings.retry_backoff, max=10),
        reraise=True,
    )
    def search_points(
        self,
        query_vector: Sequence[float],
        query_filter: Optional[Filter],
        limit: int,
        with_vectors: Any = False,
    ) -> List[ScoredPoint]:
        """
        Blocking nearest-neighbour query on the primary (hybrid) vector.

        Transient transport errors are retried with exponential backoff.

        Args:
            query_vector: Query embedding
            query_filter: Payload filter
            limit: Maximum number of points
            with_vectors: Stored vectors to return (False, True or facet names)

        Returns:
            Scored points ordered by descending similarity
        """
        response = self.client.query_points(
            collection_name=self.collection_name,
            query=list(query_vector),
            using=PRIMARY_VECTOR,
            query_filter=query_filter,
            limit=limit,
            with_payload=True,
            with_vectors=with_vectors,
        )
        return response.points

    async def get_collection_info(self) -> dict:
        """
        Get information about the collection.

        Returns:
            Dictionary with collection information:
            {
                "name": "service_media",
                "points_count": 1000,
                "status": "green",
                "vector_sizes": {"hybrid": 1408, ...}
            }
        """
        try:
            collection_info = self.client.get_collection(self.collection_name)
            vectors = collection_info.config.params.vectors
            if isinstance(vectors, dict):
                vector_sizes = {name: params.size for name, params in vectors.items()}
            else:
                vector_sizes = {PRIMARY_VECTOR: vectors.size}

            info = {
                "name": self.collection_name,
                "points_count": collection_info.points_count or 0,
                "status": str(collection_info.status),
                "vector_sizes": vector_sizes,
            }

            logger.debug(f"Collection info: {info}")
            return info

        except Exception as e:
            logger.error(f"❌ Failed to get collection info: {e}")
            raise

    async def count_vectors(self) -> int:
        """
        Get the number of points in the collection.

        Returns:
            Number of points in the collection
        """
        try:
            count = self.client.count(collection_name=self.collection_name, exact=True).count
            logger.debug(f"Collection '{self.collection_name}' has {count} points")
            return count
        except Exception as e:
            logger.error(f"❌ Failed to count vectors: {e}")
            raise

    async def delete_collection(self) -> bool:
        """
        Delete the entire collection.

        Warning: This operation cannot be undone!

        Returns:
            True if collection was deleted
        """
        try:
            if not await self.collection_exists():
                logger.warning(f"Collection '{self.collection_name}' does not exist")
                return True

            self.client.delete_collection(self.collection_name)
            logger.warning(f"⚠️  Deleted collection '{self.collection_name}'")
            return True

        except Exception as e:
            logger.error(f"❌ Failed to delete collection: {e}")
            raise

    def close(self) -> None:
        """
        Close the Qdrant client connection.
        """
        try:
            if hasattr(self, 'client') and self.client:
                self.client.close()
                logger.info("Qdrant client connection closed")
        except Exception as e:
            logger.error(f"Error closing Qdrant client: {e}")


class QdrantCandidateRetriever(CandidateRetriever):
    """Candidate retriever backed by a Qdrant collection."""

    name = "qdrant"

    def __init__(self, manager: QdrantManager):
        self.manager = manager

    async def retrieve(
        self,
        embedding: Sequence[float],
        filters: RetrievalFilters,
        limit: int,
        facet_embeddings: Optional[Dict[str, Sequence[float]]] = None,
        profile: Optional[WeightProfile] = None,
    ) -> List[Candidate]:
        extra_facets = {
            Facet(name): vector
            for name, vector in (facet_embeddings or {}).items()
            if Facet(name) is not Facet.HYBRID
        }
        query_shape = {
            "dimension": len(embedding),
            "limit": limit,
            "filters": filters.describe(),
            "facets": sorted(f.value for f in extra_facets),
        }

        try:
            points = await asyncio.to_thread(
                self.manager.search_points,
                embedding,
                build_filter(filters),
                limit,
                [f.value for f in extra_facets] if extra_facets else False,
            )
        except Exception as e:
            logger.error(f"❌ Candidate retrieval failed: {type(e).__name__}: {e} (query={query_shape})")
            raise RetrievalError(f"Vector store query failed: {e}", query_shape=query_shape) from e

        if not extra_facets:
            return [
                candidate_from_payload(point.payload, similarity_to_distance(point.score))
                for point in points
            ]

        profile = profile or resolve_weight_profile()
        candidates = []
        for point in points:
            base = similarity_to_distance(point.score)
            stored = point.vector if isinstance(point.vector, dict) else {}
            per_facet = {Facet.HYBRID: base}
            for facet, query_vector in extra_facets.items():
                stored_vector = stored.get(facet.value)
                if stored_vector is not None:
                    per_facet[facet] = cosine_distance(query_vector, stored_vector)

            candidates.append(
                candidate_from_payload(
                    point.payload,
                    fuse_distances(per_facet, profile),
                    facet_distances={f.value: d for f, d in per_facet.items()},
                )
            )

        candidates.sort(key=lambda c: c.distance)
        logger.debug(f"Fused {len(extra_facets) + 1} facets for {len(candidates)} candidates")
        return candidates

    async def ping(self) -> Dict[str, object]:
        info = await self.manager.get_collection_info()
        return {"backend": self.name, "collection": info["name"], "points_count": info["points_count"]}

    def close(self) -> None:
        self.manager.close()
