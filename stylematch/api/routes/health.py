"""
Health check endpoints.
"""
from fastapi import APIRouter, status
from typing import Dict, Any
from loguru import logger

from stylematch.api.routes import match
from stylematch.config import settings
from stylematch.utils.metrics import update_vector_store_points, set_api_health

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns:
        Simple health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
async def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check of the vector store behind the matching engine.

    Обновляет Prometheus метрики (количество точек, здоровье API).

    Returns:
        Детальный статус здоровья системы
    """
    health_status = {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "components": {},
    }

    try:
        engine = match.get_matching_engine()
        info = await engine.retriever.ping()
        health_status["components"]["vector_store"] = {"status": "healthy", **info}

        if "points_count" in info:
            update_vector_store_points(info["points_count"])

        logger.debug(f"Vector store health check: {info}")

    except Exception as e:
        detail = getattr(e, "detail", None) or str(e)
        health_status["components"]["vector_store"] = {
            "status": "unhealthy",
            "error": detail
        }
        health_status["status"] = "degraded"
        logger.error(f"Vector store health check failed: {detail}")

    set_api_health(health_status["status"] == "healthy")
    return health_status
