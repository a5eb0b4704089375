"""
Final ordering of scored matches: threshold, relevance sort, provider diversity.
"""
from collections import Counter
from typing import List, Sequence

from loguru import logger

from stylematch.schemas.match import RankedMatch

DEFAULT_PROVIDER_CAP = 2
DEFAULT_DIVERSITY_WINDOW = 10


def _relevance_order(matches: Sequence[RankedMatch]) -> List[RankedMatch]:
    # sorted() is stable, so insertion order breaks the remaining ties
    return sorted(matches, key=lambda m: (-m.match_score, m.distance))


def diversify_by_provider(
    matches: Sequence[RankedMatch],
    provider_cap: int = DEFAULT_PROVIDER_CAP,
    window: int = DEFAULT_DIVERSITY_WINDOW,
) -> List[RankedMatch]:
    """
    Spread the first `window` slots across providers.

    Slots are filled in the given order, skipping a match whose provider
    already holds `provider_cap` slots. Skipped matches are moved after the
    window, never dropped. If only capped providers remain, the next match is
    taken anyway.

    Args:
        matches: Matches in relevance order
        provider_cap: Maximum slots per provider inside the window
        window: Number of leading slots the cap applies to

    Returns:
        Reordered matches (same elements)
    """
    if provider_cap < 1:
        raise ValueError(f"provider_cap must be at least 1, got {provider_cap}")
    if window < 0:
        raise ValueError(f"window must be non-negative, got {window}")

    remaining = list(matches)
    head: List[RankedMatch] = []
    per_provider: Counter = Counter()
    promoted = 0

    while remaining and len(head) < window:
        pick = next(
            (i for i, m in enumerate(remaining) if per_provider[m.provider_id] < provider_cap),
            0,
        )
        if pick:
            promoted += 1
        match = remaining.pop(pick)
        per_provider[match.provider_id] += 1
        head.append(match)

    if promoted:
        logger.debug(f"Diversity pass promoted {promoted} matches past capped providers")
    return head + remaining


def rerank(
    matches: Sequence[RankedMatch],
    min_score: int,
    diversify: bool,
    provider_cap: int = DEFAULT_PROVIDER_CAP,
    window: int = DEFAULT_DIVERSITY_WINDOW,
) -> List[RankedMatch]:
    """
    Filter and reorder scored matches.

    1. Drop matches scoring below `min_score` (clamped to [0, 100]).
    2. Sort by score descending, then distance ascending, then input order.
    3. Optionally apply the provider diversity pass.
    4. Number the result from rank 1.

    Running rerank on its own output yields the same list.

    Args:
        matches: Scored, tagged matches
        min_score: Minimum match score to keep
        diversify: Whether to apply the provider diversity pass
        provider_cap: Maximum results per provider inside the window
        window: Number of leading slots the cap applies to

    Returns:
        Final ranked list, possibly empty
    """
    threshold = min(100, max(0, int(min_score)))

    kept = [m for m in matches if m.match_score >= threshold]
    if not kept:
        return []

    ordered = _relevance_order(kept)
    if diversify:
        ordered = diversify_by_provider(ordered, provider_cap=provider_cap, window=window)

    return [
        m if m.rank == position else m.model_copy(update={"rank": position})
        for position, m in enumerate(ordered, start=1)
    ]
