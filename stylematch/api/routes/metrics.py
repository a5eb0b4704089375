"""
Prometheus metrics endpoints.
"""
from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from stylematch.utils.metrics import get_metrics_summary

router = APIRouter(tags=["monitoring"])


@router.get("/metrics")
async def get_metrics() -> Response:
    """Metrics in the Prometheus text format, for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/metrics/summary")
async def get_metrics_summary_endpoint() -> dict:
    """
    Сводка основных метрик в JSON формате.

    Returns:
        Словарь с основными метриками
    """
    return {"status": "ok", "metrics": get_metrics_summary()}
