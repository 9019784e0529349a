"""
Pydantic schemas for the search_discourse_communities tool request/response.
JSON-only; field names are the caller-facing contract and must not change.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_serializer

from src.config.settings import SEARCH_LIMIT_DEFAULT, SEARCH_LIMIT_MAX


class SearchRequest(BaseModel):
    """Tool arguments: exactly one of query / similar_to, plus optional filters."""

    query: str | None = Field(
        None,
        min_length=1,
        description="Semantic text search query (e.g., 'note taking productivity')",
    )
    similar_to: str | None = Field(
        None,
        description=(
            "Find communities similar to this one. Accepts a community URL "
            "(e.g., 'https://forum.obsidian.md') or ID (e.g., 'discover_1376')"
        ),
    )
    limit: int = Field(
        SEARCH_LIMIT_DEFAULT,
        ge=1,
        le=SEARCH_LIMIT_MAX,
        description=f"Maximum number of results to return (default: {SEARCH_LIMIT_DEFAULT}, max: {SEARCH_LIMIT_MAX})",
    )
    min_users: int | None = Field(None, description="Filter by minimum total user count")
    engagement_tier: Literal["high", "medium", "low"] | None = Field(
        None,
        description="Filter by engagement level: high (>5% MAU), medium (>1% MAU), low (<1% MAU)",
    )
    locale: str | None = Field(None, description="Filter by locale code (e.g., 'en', 'de', 'fr')")


class Community(BaseModel):
    """
    One community in search results. confidence and match_tier are derived from distance
    when the result is built; confidence and distance keep full precision internally and
    are rounded only when serialized.
    """

    id: str
    title: str
    url: str
    description: str
    users_count: int = Field(..., ge=0)
    active_users_30_days: int = Field(..., ge=0)
    engagement_tier: str = Field(..., pattern="^(high|medium|low|unknown)$")
    categories: str
    tags: str
    confidence: float = Field(..., ge=0.1, le=1.0)
    distance: float
    match_tier: str = Field(..., pattern="^(exact|semantic|adjacent|peripheral)$")

    @field_serializer("confidence")
    def serialize_confidence(self, value: float) -> float:
        return round(value, 3)

    @field_serializer("distance")
    def serialize_distance(self, value: float) -> float:
        return round(value, 4)


class ConfidenceStats(BaseModel):
    mean: float
    median: float
    min: float
    max: float


class TierDistribution(BaseModel):
    exact: int = 0
    semantic: int = 0
    adjacent: int = 0
    peripheral: int = 0


class SearchSummary(BaseModel):
    total_found: int
    returned: int
    has_more: bool
    confidence_stats: ConfidenceStats
    tier_distribution: TierDistribution


class SimilarToReference(BaseModel):
    """Source community a similarity search was seeded from."""

    id: str
    title: str
    url: str


class SearchResponse(BaseModel):
    """
    Tool result envelope. Exactly one of query / similar_to is set, echoing the mode used;
    the other is omitted on serialization.
    """

    query: str | None = None
    similar_to: SimilarToReference | None = None
    communities: list[Community] = Field(default_factory=list)
    summary: SearchSummary
    next_actions: list[str] = Field(default_factory=list)


class ToolDescriptor(BaseModel):
    """GET /tools entry: what a tool-calling client needs to invoke a tool."""

    name: str
    title: str
    description: str
    input_schema: dict[str, Any]
    annotations: dict[str, Any] = Field(default_factory=dict)
