"""
Search flow: validate mode, build filter clause, query the store, score, rerank, summarize.
Text mode queries by text; similarity mode resolves the seed community and queries by its
embedding, dropping the seed itself from the results.
"""

import logging
from dataclasses import dataclass
from typing import Any

from src.api.schemas import Community, SearchRequest, SearchResponse, SearchSummary, SimilarToReference
from src.config.settings import require_database_url
from src.services.errors import SearchValidationError, StoreTransportError
from src.services.resolver import resolve_similar
from src.services.results import exclude_id, rerank, transform_results
from src.services.scoring import confidence_stats, tier_distribution
from src.services.storage import CommunityStore, QueryResult

logger = logging.getLogger(__name__)

SELECT_SITE_ACTION = "Use discourse_select_site with one of the URLs above to interact with that community."
HIGH_ENGAGEMENT_ACTION = "Consider starting with high-engagement communities for more active discussions."
BROADEN_ACTION = "Try a different search query or remove filters to find more communities."


@dataclass(frozen=True)
class TextQuery:
    text: str


@dataclass(frozen=True)
class SimilarTo:
    target: str


SearchMode = TextQuery | SimilarTo


def parse_search_mode(query: str | None, similar_to: str | None) -> SearchMode:
    """Exactly one of query / similar_to must be non-empty."""
    if bool(query) == bool(similar_to):
        raise SearchValidationError("Validation error: Provide exactly one of 'query' or 'similar_to'")
    if query:
        return TextQuery(query)
    return SimilarTo(similar_to)


def build_where_clause(
    *,
    min_users: int | None = None,
    engagement_tier: str | None = None,
    locale: str | None = None,
) -> dict[str, Any] | None:
    """AND together one clause per present filter; None when unfiltered."""
    clauses: list[dict[str, Any]] = []
    if min_users is not None:
        clauses.append({"users_count": {"$gte": min_users}})
    if engagement_tier:
        clauses.append({"engagement_tier": engagement_tier})
    if locale:
        clauses.append({"locale": locale})

    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def next_actions(communities: list[Community]) -> list[str]:
    if not communities:
        return [BROADEN_ACTION]
    actions = [SELECT_SITE_ACTION]
    if any(c.engagement_tier == "high" for c in communities):
        actions.append(HIGH_ENGAGEMENT_ACTION)
    return actions


def _first_batch(result: QueryResult, skip_id: str | None = None) -> list[Community]:
    # A batch of one was submitted; read index 0.
    ids = result.ids[0] if result.ids else []
    metadatas = result.metadatas[0] if result.metadatas else []
    distances = result.distances[0] if result.distances else []
    if skip_id is not None:
        # Match on the row id; metadata ids are not guaranteed to equal it.
        keep = [i for i, store_id in enumerate(ids) if store_id != skip_id]
        ids = [ids[i] for i in keep]
        metadatas = [metadatas[i] if i < len(metadatas) else None for i in keep]
        distances = [distances[i] if i < len(distances) else None for i in keep]
    return transform_results(ids, metadatas, distances)


async def search(request: SearchRequest, store: CommunityStore | None) -> SearchResponse:
    """
    Run one community search. All-or-nothing: raises a SearchError subclass on failure,
    never returns partial results.
    """
    mode = parse_search_mode(request.query, request.similar_to)
    if store is None:
        require_database_url()
        raise StoreTransportError("Vector store unavailable: connection pool could not be created")

    where = build_where_clause(
        min_users=request.min_users,
        engagement_tier=request.engagement_tier,
        locale=request.locale,
    )
    limit = request.limit
    similar_ref: SimilarToReference | None = None

    if isinstance(mode, TextQuery):
        result = await store.query_by_text([mode.text], limit, where)
        communities = rerank(_first_batch(result))[:limit]
    else:
        source = await resolve_similar(store, mode.target)
        # One extra slot for the seed, which is always its own nearest neighbor.
        result = await store.query_by_embedding([source.embedding], limit + 1, where)
        hits = exclude_id(_first_batch(result, skip_id=source.id), source.id)
        communities = rerank(hits)[:limit]
        similar_ref = SimilarToReference(
            id=source.id,
            title=source.metadata.get("title") or "Unknown",
            url=source.metadata.get("url") or mode.target,
        )

    logger.info(
        "community search mode=%s returned=%d limit=%d",
        "query" if similar_ref is None else "similar_to",
        len(communities),
        limit,
    )
    return SearchResponse(
        query=mode.text if isinstance(mode, TextQuery) else None,
        similar_to=similar_ref,
        communities=communities,
        summary=SearchSummary(
            total_found=len(communities),
            returned=len(communities),
            has_more=len(communities) == limit,
            confidence_stats=confidence_stats(communities),
            tier_distribution=tier_distribution(communities),
        ),
        next_actions=next_actions(communities),
    )
