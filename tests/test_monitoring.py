"""
Tests for monitoring and metrics functionality.
"""
import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from stylematch.api.main import app
from stylematch.utils.metrics import (
    get_metrics_summary,
    record_match_scores,
    record_retrieval,
    record_search,
    set_api_health,
    update_vector_store_points,
)


def sample(name: str, labels: dict = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture
def api_client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_metrics_endpoint(api_client):
    """
    Тест endpoint /api/v1/metrics.

    Проверяет, что endpoint возвращает метрики в формате Prometheus.
    """
    async with api_client as client:
        response = await client.get("/api/v1/metrics")

    assert response.status_code == status.HTTP_200_OK
    assert "text/plain" in response.headers["content-type"]

    content = response.text
    assert "stylematch_searches_total" in content
    assert "stylematch_search_duration_seconds" in content
    assert "stylematch_api_health" in content
    assert "stylematch_vector_store_points" in content


@pytest.mark.asyncio
async def test_metrics_summary_endpoint(api_client):
    """
    Тест endpoint /api/v1/metrics/summary.
    """
    async with api_client as client:
        response = await client.get("/api/v1/metrics/summary")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ok"
    assert set(data["metrics"]) == {"api_health", "vector_store_points"}


def test_record_search_metrics():
    """Успешные и неуспешные поиски считаются раздельно."""
    searches_before = sample("stylematch_searches_total", {"search_mode": "visual"})
    errors_before = sample("stylematch_search_errors_total", {"error_type": "retrieval"})

    record_search("visual", 0.05, success=True)
    record_search("visual", 0.8, success=False, error_type="retrieval")

    assert sample("stylematch_searches_total", {"search_mode": "visual"}) == searches_before + 2
    assert sample("stylematch_search_errors_total", {"error_type": "retrieval"}) == errors_before + 1


def test_record_retrieval_metrics():
    count_before = sample("stylematch_retrieval_duration_seconds_count")
    candidates_before = sample("stylematch_candidates_retrieved_sum")

    record_retrieval(0.01, candidates=40)

    assert sample("stylematch_retrieval_duration_seconds_count") == count_before + 1
    assert sample("stylematch_candidates_retrieved_sum") == candidates_before + 40


def test_record_match_scores():
    count_before = sample("stylematch_match_score_count")

    record_match_scores([100, 70, 70])

    assert sample("stylematch_match_score_count") == count_before + 3


def test_update_gauge_metrics():
    """
    Тест обновления gauge метрик.
    """
    update_vector_store_points(200)
    set_api_health(True)

    summary = get_metrics_summary()
    assert summary["vector_store_points"] == 200
    assert summary["api_health"] == 1

    update_vector_store_points(250)
    set_api_health(False)

    summary = get_metrics_summary()
    assert summary["vector_store_points"] == 250
    assert summary["api_health"] == 0


@pytest.mark.asyncio
async def test_logging_middleware(api_client):
    """
    Тест middleware для логирования запросов.

    Проверяет заголовки, которые добавляет middleware.
    """
    async with api_client as client:
        response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-42"})

    assert response.status_code == status.HTTP_200_OK
    assert "X-Process-Time" in response.headers
    assert response.headers["X-Request-ID"] == "req-42"
