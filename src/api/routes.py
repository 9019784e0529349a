"""
API routes: health (readiness), tool listing, POST /tools/search_discourse_communities.
Small, stable API surface; JSON-only; search failures return the {error} envelope.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.api.errors import error_response, search_error_response
from src.api.schemas import SearchRequest, SearchResponse, ToolDescriptor
from src.services.errors import SearchError
from src.services.search_service import search

logger = logging.getLogger(__name__)

router = APIRouter()

SEARCH_TOOL = ToolDescriptor(
    name="search_discourse_communities",
    title="Search Discourse Communities",
    description=(
        "Discover Discourse forum communities by topic or find similar communities. "
        "Use 'query' for semantic text search (e.g., 'note taking productivity') or "
        "'similar_to' to find communities similar to a known one by URL or ID. "
        "Provide exactly one of 'query' or 'similar_to'. "
        "Returns communities with confidence scores and engagement metrics."
    ),
    input_schema=SearchRequest.model_json_schema(),
    annotations={
        "title": "Search Discourse Communities Directory",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)


@router.get("/health")
async def health() -> dict[str, Any]:
    """
    Health or readiness endpoint for deployment/load balancer.
    Does not perform heavy checks (e.g. no DB ping).
    """
    return {"status": "ok"}


@router.get("/tools", response_model=list[ToolDescriptor])
async def list_tools() -> list[ToolDescriptor]:
    return [SEARCH_TOOL]


@router.post(
    f"/tools/{SEARCH_TOOL.name}",
    response_model=SearchResponse,
    response_model_exclude_none=True,
)
async def search_communities(request: Request, body: SearchRequest) -> SearchResponse | JSONResponse:
    """
    Search communities by text (query) or by similarity to a known one (similar_to).
    On failure returns {error} with a status matching the cause; never partial results.
    """
    store = getattr(request.app.state, "store", None)
    try:
        return await search(body, store)
    except SearchError as e:
        logger.error("search_discourse_communities failed: %s", e.message)
        return search_error_response(e)
    except Exception as e:
        logger.exception("search_discourse_communities failed: %s", e)
        return error_response(500, "internal_error", detail=None)
