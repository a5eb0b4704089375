"""
Tag overlap between the query image and a candidate, for explainability only.
"""
from typing import Iterable, List, Set


def normalize_tag(tag: str) -> str:
    return tag.strip().lower()


def normalize_tags(tags: Iterable[str]) -> Set[str]:
    """Normalized, non-empty tag set."""
    return {normalize_tag(tag) for tag in tags if tag and normalize_tag(tag)}


def matching_tags(query_tags: Iterable[str], candidate_tags: Iterable[str]) -> List[str]:
    """
    Tags present in both sets, compared case-insensitively.

    Args:
        query_tags: Tags of the query image
        candidate_tags: Tags of the candidate media, in display order

    Returns:
        Candidate tags (original spelling) that also appear in the query,
        deduplicated, in order of first appearance in `candidate_tags`
    """
    wanted = normalize_tags(query_tags or [])
    if not wanted:
        return []

    seen: Set[str] = set()
    result = []
    for tag in candidate_tags or []:
        if not tag:
            continue
        key = normalize_tag(tag)
        if key in wanted and key not in seen:
            seen.add(key)
            result.append(tag.strip())
    return result
