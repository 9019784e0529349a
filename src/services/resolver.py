"""
Resolve a similar_to input (community id or URL) to the stored record and its embedding.
"""

import logging
from dataclasses import dataclass
from typing import Any

from src.config.settings import COMMUNITY_ID_PREFIX
from src.services.errors import CommunityNotFoundError, EmbeddingUnavailableError
from src.services.storage import CommunityStore, GetResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedCommunity:
    id: str
    metadata: dict[str, Any]
    embedding: list[float]


def _first(result: GetResult) -> tuple[str, dict[str, Any], list[float] | None] | None:
    if not result.ids:
        return None
    metadata = result.metadatas[0] if result.metadatas else None
    embedding = result.embeddings[0] if result.embeddings else None
    return result.ids[0], metadata or {}, embedding


async def _lookup(store: CommunityStore, target: str) -> tuple[str, dict[str, Any], list[float] | None]:
    if target.startswith(COMMUNITY_ID_PREFIX):
        found = _first(await store.get_by_id([target]))
        if found is None:
            raise CommunityNotFoundError(target, by="ID")
        return found

    # Stored URLs are not consistently normalized; try without, then with, a trailing slash.
    url = target[:-1] if target.endswith("/") else target
    found = _first(await store.get_by_metadata({"url": url}))
    if found is None:
        found = _first(await store.get_by_metadata({"url": url + "/"}))
    if found is None:
        raise CommunityNotFoundError(target, by="URL")
    return found


async def resolve_similar(store: CommunityStore, target: str) -> ResolvedCommunity:
    """
    Look up the community named by target and return it with its embedding.
    Raises CommunityNotFoundError when nothing matches, EmbeddingUnavailableError when the
    record exists without an embedding.
    """
    community_id, metadata, embedding = await _lookup(store, target)
    if not embedding:
        raise EmbeddingUnavailableError(community_id, target)
    logger.debug("resolved %s to %s", target, community_id)
    return ResolvedCommunity(id=community_id, metadata=metadata, embedding=list(embedding))
