"""
Main FastAPI application.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from stylematch.config import settings
from stylematch.api.routes import match, health, metrics
from stylematch.db.qdrant import QdrantManager, QdrantCandidateRetriever
from stylematch.matching.engine import MatchingEngine
from stylematch.middleware.logging import LoggingMiddleware
from stylematch.utils.logger import setup_logging
from stylematch.utils.metrics import set_api_health, update_vector_store_points


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info("Starting StyleMatch API...")
    logger.info("=" * 60)

    try:
        logger.info("Initializing Qdrant manager...")
        qdrant_manager = QdrantManager(
            host=settings.qdrant_host,
            port=settings.qdrant_port,
            collection_name=settings.qdrant_collection_name,
            location=settings.qdrant_location,
        )

        if await qdrant_manager.collection_exists():
            info = await qdrant_manager.get_collection_info()
            update_vector_store_points(info["points_count"])
            logger.success(f"✅ Qdrant connected: {info['points_count']} media points in collection")
        else:
            logger.warning("⚠️  Qdrant collection does not exist. Run scripts/load_demo_media.py first.")

        match.matching_engine = MatchingEngine(retriever=QdrantCandidateRetriever(qdrant_manager))
        logger.success(
            f"✅ Matching engine ready (calibration={settings.score_calibration}, "
            f"min_score={settings.min_match_score}, diversify={settings.diversify_results})"
        )

        set_api_health(healthy=True)
        logger.info(f"📊 Metrics available at: http://{settings.api_host}:{settings.api_port}/api/v1/metrics")

    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        set_api_health(healthy=False)
        raise

    yield

    logger.info("Shutting down StyleMatch API...")
    set_api_health(healthy=False)

    if match.matching_engine:
        match.matching_engine.retriever.close()
        match.matching_engine = None

    logger.info("✅ Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Visual similarity matching for beauty service media",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(match.router, tags=["match"])
    app.include_router(metrics.router, prefix="/api/v1", tags=["monitoring"])

    return app


app = create_app()
