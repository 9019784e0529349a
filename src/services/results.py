"""
Result aggregation: turn raw vector-store hits into Community objects and rerank them.
Pure functions over in-memory sequences; no state survives a request.
"""

import logging
from collections.abc import Mapping, Sequence
from functools import cmp_to_key
from typing import Any

from src.api.schemas import Community
from src.config.settings import RERANK_CONFIDENCE_BAND
from src.services.scoring import classify_match_tier, confidence_from_distance

logger = logging.getLogger(__name__)

ENGAGEMENT_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1, "unknown": 0}


def _count(value: Any) -> int:
    """Non-negative int from a metadata field; 0 when missing or not numeric."""
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _text(value: Any, default: str = "") -> str:
    return str(value) if value else default


def _engagement(value: Any) -> str:
    if isinstance(value, str) and value in ENGAGEMENT_RANK:
        return value
    return "unknown"


def to_community(store_id: str, metadata: Mapping[str, Any], distance: float) -> Community:
    """Build one Community from a stored record; missing metadata fields get defaults."""
    return Community(
        id=_text(metadata.get("id"), store_id),
        title=_text(metadata.get("title"), "Unknown"),
        url=_text(metadata.get("url")),
        description=_text(metadata.get("description") or metadata.get("excerpt")),
        users_count=_count(metadata.get("users_count")),
        active_users_30_days=_count(metadata.get("active_users_30_days")),
        engagement_tier=_engagement(metadata.get("engagement_tier")),
        categories=_text(metadata.get("categories")),
        tags=_text(metadata.get("tags")),
        confidence=confidence_from_distance(distance),
        distance=distance,
        match_tier=classify_match_tier(distance),
    )


def transform_results(
    ids: Sequence[str],
    metadatas: Sequence[Mapping[str, Any] | None],
    distances: Sequence[float | None],
) -> list[Community]:
    """
    Score and classify raw hits, preserving store order (distance ascending).
    Hits with null metadata or null distance are skipped; sparse results are expected.
    Empty metadata is kept and filled with defaults.
    """
    communities: list[Community] = []
    for i, store_id in enumerate(ids):
        metadata = metadatas[i] if i < len(metadatas) else None
        distance = distances[i] if i < len(distances) else None
        if metadata is None or distance is None:
            logger.debug("skipping sparse hit %s", store_id)
            continue
        communities.append(to_community(store_id, metadata, float(distance)))
    return communities


def _compare(a: Community, b: Community) -> int:
    gap = a.confidence - b.confidence
    if abs(gap) > RERANK_CONFIDENCE_BAND:
        return -1 if gap > 0 else 1
    engagement = ENGAGEMENT_RANK[b.engagement_tier] - ENGAGEMENT_RANK[a.engagement_tier]
    if engagement:
        return engagement
    return b.active_users_30_days - a.active_users_30_days


def rerank(communities: Sequence[Community]) -> list[Community]:
    """
    Reorder so near-equal relevance does not hide more active communities.
    Confidence (descending) decides only when the gap exceeds RERANK_CONFIDENCE_BAND;
    otherwise engagement tier, then 30-day active users, both descending.
    Stable: indistinguishable entries keep their incoming order.
    """
    return sorted(communities, key=cmp_to_key(_compare))


def exclude_id(communities: Sequence[Community], community_id: str) -> list[Community]:
    """Drop the entry whose id is community_id (the seed of a similarity search)."""
    return [c for c in communities if c.id != community_id]
