"""
Visual similarity match endpoints.
"""
import time
from typing import Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException
from loguru import logger

from stylematch.exceptions import RetrievalError, ValidationError
from stylematch.matching.engine import MatchingEngine
from stylematch.matching.weights import list_weight_profiles, resolve_weight_profile
from stylematch.schemas.match import SearchRequest, SearchResult, WeightProfileInfo
from stylematch.utils.metrics import record_search

router = APIRouter(prefix="/api/v1/match", tags=["match"])

# Глобальный инстанс (инициализируется при старте приложения)
matching_engine: Optional[MatchingEngine] = None


def get_matching_engine() -> MatchingEngine:
    """Get matching engine instance."""
    if matching_engine is None:
        raise HTTPException(
            status_code=503,
            detail="Matching engine not initialized. Please restart the application."
        )
    return matching_engine


@router.post("", response_model=SearchResult)
async def match_services(
    request: SearchRequest = Body(..., description="Match request")
) -> SearchResult:
    """
    Find provider service media visually similar to a reference image.

    The caller supplies the embedding (and optional tags) of the reference
    image; results are scored 0-100, explained by shared tags and spread
    across providers.

    Raises:
        HTTPException: 400 on an invalid request, 503 if the vector store is unavailable
    """
    start_time = time.time()
    mode = resolve_weight_profile(request.search_mode).mode.value
    engine = get_matching_engine()

    try:
        result = await engine.search(request)
    except ValidationError as e:
        record_search(mode, time.time() - start_time, success=False, error_type="validation")
        logger.info(f"Rejected match request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except RetrievalError as e:
        record_search(mode, time.time() - start_time, success=False, error_type="retrieval")
        logger.error(f"Match search failed: {e} (query={e.query_shape})")
        raise HTTPException(status_code=503, detail="Search temporarily unavailable. Please retry.")
    except Exception as e:
        record_search(mode, time.time() - start_time, success=False)
        logger.exception(f"Match search crashed: {type(e).__name__}")
        raise HTTPException(status_code=500, detail="Search failed")

    record_search(mode, time.time() - start_time, success=True)
    return result


@router.get("/modes", response_model=List[WeightProfileInfo])
async def list_search_modes() -> List[WeightProfileInfo]:
    """List the available search modes and their facet weights."""
    return [
        WeightProfileInfo(mode=mode, weights=weights)
        for mode, weights in list_weight_profiles().items()
    ]


@router.get("/modes/{mode}", response_model=WeightProfileInfo)
async def get_search_mode(mode: str) -> WeightProfileInfo:
    """Resolve a mode name the same way a search would (unknown names fall back to balanced)."""
    profile = resolve_weight_profile(mode)
    return WeightProfileInfo(mode=profile.mode.value, weights=profile.as_dict())
