"""
Multi-vector fusion: combine per-facet cosine distances with a weight profile.
"""
from typing import Mapping, Sequence, Union

import numpy as np

from stylematch.matching.weights import Facet, WeightProfile

VectorLike = Union[Sequence[float], np.ndarray]


def cosine_distance(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine distance between two vectors, in [0, 2].

    Raises:
        ValueError: If the vectors differ in length or either has zero norm
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector shape mismatch: {va.shape} vs {vb.shape}")

    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        raise ValueError("Cosine distance is undefined for zero vectors")

    similarity = float(np.dot(va, vb) / norm)
    return float(np.clip(1.0 - similarity, 0.0, 2.0))


def fuse_distances(facet_distances: Mapping[Facet, float], profile: WeightProfile) -> float:
    """
    Weighted mean of per-facet distances.

    Weights are renormalized over the facets present, so a candidate missing
    a facet vector is judged on the facets it has.

    Args:
        facet_distances: Cosine distance per facet (each in [0, 2])
        profile: Resolved weight profile

    Returns:
        Fused distance in [0, 2]
    """
    if not facet_distances:
        raise ValueError("No facet distances to fuse")

    total_weight = 0.0
    weighted = 0.0
    for facet, distance in facet_distances.items():
        weight = profile.weight(Facet(facet))
        total_weight += weight
        weighted += weight * distance

    if total_weight == 0:
        # only zero-weight facets present: fall back to a plain mean
        return float(np.mean(list(facet_distances.values())))
    return float(np.clip(weighted / total_weight, 0.0, 2.0))
