"""
Test fakes: an in-memory CommunityStore that records every call it receives.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.services.storage import GetResult, QueryResult


@dataclass
class FakeRecord:
    id: str
    metadata: dict[str, Any] | None
    embedding: list[float] | None = None


def community_metadata(community_id: str, **overrides: Any) -> dict[str, Any]:
    """Metadata shaped like an indexed Discourse site."""
    metadata: dict[str, Any] = {
        "id": community_id,
        "title": f"Forum {community_id}",
        "url": f"https://{community_id}.example.com",
        "description": "A community",
        "users_count": 1000,
        "active_users_30_days": 50,
        "engagement_tier": "medium",
        "categories": "general",
        "tags": "tag",
        "locale": "en",
    }
    metadata.update(overrides)
    return metadata


def query_result(*rows: tuple[str, dict[str, Any] | None, float | None]) -> QueryResult:
    """Single-batch QueryResult from (id, metadata, distance) rows."""
    return QueryResult(
        ids=[[r[0] for r in rows]],
        metadatas=[[r[1] for r in rows]],
        distances=[[r[2] for r in rows]],
    )


@dataclass
class FakeCommunityStore:
    records: list[FakeRecord] = field(default_factory=list)
    hits: QueryResult = field(default_factory=query_result)
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    def _hits(self, limit: int) -> QueryResult:
        return QueryResult(
            ids=[self.hits.ids[0][:limit]],
            metadatas=[self.hits.metadatas[0][:limit]],
            distances=[self.hits.distances[0][:limit]],
        )

    def _result(self, records: list[FakeRecord]) -> GetResult:
        return GetResult(
            ids=[r.id for r in records],
            metadatas=[r.metadata for r in records],
            embeddings=[r.embedding for r in records],
        )

    async def query_by_text(
        self, texts: Sequence[str], limit: int, where: dict[str, Any] | None = None
    ) -> QueryResult:
        self.calls.append(("query_by_text", list(texts), limit, where))
        return self._hits(limit)

    async def query_by_embedding(
        self, vectors: Sequence[Sequence[float]], limit: int, where: dict[str, Any] | None = None
    ) -> QueryResult:
        self.calls.append(("query_by_embedding", [list(v) for v in vectors], limit, where))
        return self._hits(limit)

    async def get_by_id(self, ids: Sequence[str]) -> GetResult:
        self.calls.append(("get_by_id", list(ids)))
        return self._result([r for r in self.records if r.id in ids])

    async def get_by_metadata(self, where: dict[str, Any]) -> GetResult:
        self.calls.append(("get_by_metadata", dict(where)))
        return self._result(
            [
                r
                for r in self.records
                if r.metadata and all(r.metadata.get(k) == v for k, v in where.items())
            ]
        )

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]
