"""
Tests for API endpoints.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from helpers import TEST_DIM, basis, media_payload, media_vectors, rotated
from stylematch.api.main import app
from stylematch.api.routes import match
from stylematch.db.qdrant import QdrantCandidateRetriever
from stylematch.exceptions import RetrievalError
from stylematch.matching.engine import MatchingEngine
from stylematch.matching.retriever import CandidateRetriever

client = TestClient(app)


class UnavailableRetriever(CandidateRetriever):
    name = "unavailable"

    async def retrieve(self, embedding, filters, limit, facet_embeddings=None, profile=None):
        raise RetrievalError("connection refused", query_shape={"dimension": len(embedding)})

    async def ping(self):
        raise RetrievalError("connection refused")


def install_engine(retriever) -> None:
    match.matching_engine = MatchingEngine(
        retriever,
        embedding_dimension=TEST_DIM,
        facet_vector_sizes={"hybrid": TEST_DIM, "visual": TEST_DIM},
    )


@pytest.fixture(autouse=True)
def reset_engine():
    yield
    match.matching_engine = None


@pytest.fixture
def qdrant_engine(qdrant_manager):
    payloads = [
        media_payload("a", "prov_1", tags=["box-braids", "knotless"]),
        media_payload("b", "prov_2", provider_city="Houston", provider_state="TX"),
        media_payload("c", "prov_3"),
    ]
    vectors = [
        media_vectors(basis(0)),
        media_vectors(rotated(1, 0.9)),
        media_vectors(rotated(2, 0.2)),
    ]
    asyncio.run(qdrant_manager.upsert_media(payloads, vectors))
    install_engine(QdrantCandidateRetriever(qdrant_manager))


def test_health_check():
    """Test basic health check endpoint."""
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "service" in data
    assert "version" in data


def test_detailed_health_check(qdrant_engine):
    response = client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"]["vector_store"]["points_count"] == 3


def test_detailed_health_check_degraded():
    install_engine(UnavailableRetriever())

    response = client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["components"]["vector_store"]["status"] == "unhealthy"


def test_match_requires_embedding(qdrant_engine):
    response = client.post("/api/v1/match", json={})

    assert response.status_code == 422


def test_match_rejects_max_results_above_limit(qdrant_engine):
    response = client.post("/api/v1/match", json={"embedding": basis(0), "max_results": 51})

    assert response.status_code == 400
    assert "max_results" in response.json()["detail"]


def test_match_rejects_non_positive_max_results(qdrant_engine):
    response = client.post("/api/v1/match", json={"embedding": basis(0), "max_results": 0})

    assert response.status_code == 422


def test_match_rejects_wrong_dimension(qdrant_engine):
    response = client.post("/api/v1/match", json={"embedding": [0.1, 0.2, 0.3]})

    assert response.status_code == 400
    assert "dimensions" in response.json()["detail"]


def test_match(qdrant_engine):
    response = client.post(
        "/api/v1/match",
        json={
            "embedding": basis(0),
            "tags": ["Knotless", "long-hair"],
            "max_results": 10,
            "search_mode": "style",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Matches found"
    assert data["search_mode"] == "style"
    assert data["total_matches"] == 2
    assert [m["media_id"] for m in data["matches"]] == ["a", "b"]
    assert [m["match_score"] for m in data["matches"]] == [100, 90]
    assert [m["rank"] for m in data["matches"]] == [1, 2]
    assert data["matches"][0]["matching_tags"] == ["knotless"]
    assert data["matches"][0]["price"] == 150.0
    assert "X-Request-ID" in response.headers


def test_match_location_filter(qdrant_engine):
    response = client.post(
        "/api/v1/match",
        json={"embedding": basis(0), "location": {"city": "Houston"}},
    )

    assert response.status_code == 200
    assert [m["media_id"] for m in response.json()["matches"]] == ["b"]


def test_match_no_results_is_not_an_error(qdrant_engine):
    response = client.post(
        "/api/v1/match",
        json={"embedding": basis(0), "location": {"city": "Chicago"}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["matches"] == []
    assert data["total_matches"] == 0
    assert data["message"] == "No matches found"


def test_match_store_unavailable():
    install_engine(UnavailableRetriever())

    response = client.post("/api/v1/match", json={"embedding": basis(0)})

    assert response.status_code == 503
    assert "temporarily unavailable" in response.json()["detail"]


def test_match_engine_not_initialized():
    response = client.post("/api/v1/match", json={"embedding": basis(0)})

    assert response.status_code == 503


def test_list_modes():
    response = client.get("/api/v1/match/modes")

    assert response.status_code == 200
    modes = {item["mode"]: item["weights"] for item in response.json()}
    assert set(modes) == {"balanced", "visual", "semantic", "style", "color"}
    for weights in modes.values():
        assert sum(weights.values()) == pytest.approx(1.0)


def test_resolve_mode_fallback():
    response = client.get("/api/v1/match/modes/unknown")

    assert response.status_code == 200
    assert response.json()["mode"] == "balanced"
