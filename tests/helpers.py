"""
Factories shared by the matching tests.
"""
from decimal import Decimal
from typing import Dict, List, Optional

import numpy as np

from stylematch.schemas.match import Candidate, RankedMatch

# Small vectors keep the in-memory Qdrant tests fast.
TEST_DIM = 8
TEST_FACET_SIZES = {"hybrid": TEST_DIM, "visual": TEST_DIM}


def make_candidate(
    media_id: str,
    distance: float,
    provider_id: str = "prov_1",
    tags: Optional[List[str]] = None,
    **overrides,
) -> Candidate:
    data = {
        "media_id": media_id,
        "media_url": f"https://cdn.example.com/{media_id}.jpg",
        "service_id": f"svc_{media_id}",
        "service_title": "Balayage",
        "price": Decimal("120.00"),
        "currency": "USD",
        "category": "hair-color",
        "provider_id": provider_id,
        "provider_name": f"Studio {provider_id}",
        "city": "Atlanta",
        "state": "GA",
        "tags": tags or [],
        "distance": distance,
    }
    data.update(overrides)
    return Candidate(**data)


def make_match(
    media_id: str,
    score: int,
    distance: float = 0.1,
    provider_id: str = "prov_1",
    **overrides,
) -> RankedMatch:
    candidate = make_candidate(media_id, distance, provider_id=provider_id, **overrides)
    return RankedMatch(**dict(candidate), match_score=score)


def basis(index: int, size: int = TEST_DIM) -> List[float]:
    """Unit vector along one axis."""
    v = [0.0] * size
    v[index] = 1.0
    return v


def rotated(angle_index: int, cos_sim: float, size: int = TEST_DIM) -> List[float]:
    """Unit vector with the given cosine similarity to basis(0)."""
    v = [0.0] * size
    v[0] = cos_sim
    v[angle_index] = float(np.sqrt(max(0.0, 1.0 - cos_sim ** 2)))
    return v


def media_payload(media_id: str, provider_id: str, **overrides) -> Dict:
    payload = {
        "media_id": media_id,
        "media_url": f"https://cdn.example.com/{media_id}.jpg",
        "service_id": f"svc_{media_id}",
        "service_title": "Knotless braids",
        "price": 150.0,
        "currency": "USD",
        "category": "braiding",
        "provider_id": provider_id,
        "provider_name": f"Studio {provider_id}",
        "provider_city": "Atlanta",
        "provider_state": "GA",
        "tags": ["knotless", "box-braids"],
        "is_active": True,
    }
    payload.update(overrides)
    return payload


def media_vectors(hybrid: List[float], visual: Optional[List[float]] = None) -> Dict[str, List[float]]:
    """Named vectors for one media point; visual defaults to the hybrid vector."""
    return {"hybrid": hybrid, "visual": visual if visual is not None else hybrid}
