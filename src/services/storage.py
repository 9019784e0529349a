"""
Storage layer: read-only access to the communities table (pgvector cosine distance).
Exposes the batched query / get shapes the search pipeline consumes; never writes.
"""

import asyncio
import json
import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import asyncpg

from src.config.settings import COMMUNITIES_TABLE
from src.services.embedding import generate_embeddings
from src.services.errors import StoreTransportError

logger = logging.getLogger(__name__)

WhereClause = Mapping[str, Any]

_COMPARISONS = {"$eq": "=", "$ne": "<>", "$gt": ">", "$gte": ">=", "$lt": "<", "$lte": "<="}
_LOGICAL = {"$and": "AND", "$or": "OR"}
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class QueryResult:
    """Nearest-neighbor hits, one inner list per submitted query."""

    ids: list[list[str]] = field(default_factory=list)
    metadatas: list[list[dict[str, Any] | None]] = field(default_factory=list)
    distances: list[list[float | None]] = field(default_factory=list)


@dataclass
class GetResult:
    """Records fetched by id or metadata equality."""

    ids: list[str] = field(default_factory=list)
    metadatas: list[dict[str, Any] | None] = field(default_factory=list)
    embeddings: list[list[float] | None] = field(default_factory=list)


class CommunityStore(Protocol):
    async def query_by_text(
        self, texts: Sequence[str], limit: int, where: WhereClause | None = None
    ) -> QueryResult: ...

    async def query_by_embedding(
        self, vectors: Sequence[Sequence[float]], limit: int, where: WhereClause | None = None
    ) -> QueryResult: ...

    async def get_by_id(self, ids: Sequence[str]) -> GetResult: ...

    async def get_by_metadata(self, where: WhereClause) -> GetResult: ...


def _identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid identifier in where clause: {name!r}")
    return name


def _comparison(name: str, op: str, value: Any, params: list[Any]) -> str:
    column = f"(metadata ->> '{_identifier(name)}')"
    if isinstance(value, bool):
        params.append("true" if value else "false")
        return f"{column} {op} ${len(params)}"
    if isinstance(value, (int, float)):
        params.append(float(value))
        return f"{column}::float8 {op} ${len(params)}"
    params.append(str(value))
    return f"{column} {op} ${len(params)}"


def compile_where(clause: WhereClause | None, params: list[Any]) -> str:
    """
    Compile a metadata where clause into a SQL predicate over the jsonb metadata column.
    Values are appended to params and referenced by position ($n), so params may already
    hold the query's leading arguments.

    Supported: {field: value}, {field: {"$gte": n, ...}}, {"$and": [...]}, {"$or": [...]}.
    """
    if not clause:
        return "TRUE"
    parts: list[str] = []
    for key, value in clause.items():
        if key in _LOGICAL:
            if not value:
                raise ValueError(f"{key} requires at least one clause")
            joined = f" {_LOGICAL[key]} ".join(compile_where(c, params) for c in value)
            parts.append(f"({joined})")
        elif isinstance(value, Mapping):
            for op, operand in value.items():
                if op not in _COMPARISONS:
                    raise ValueError(f"Unsupported operator in where clause: {op}")
                parts.append(_comparison(key, _COMPARISONS[op], operand, params))
        else:
            parts.append(_comparison(key, "=", value, params))
    return " AND ".join(parts)


def _vector_literal(vector: Sequence[float]) -> str:
    # Embedding as string for asyncpg since the vector type is not registered.
    return "[" + ",".join(str(float(x)) for x in vector) + "]"


def _decode_json(raw: Any) -> Any:
    if raw is None or not isinstance(raw, str):
        return raw
    return json.loads(raw)


class PgCommunityStore:
    """CommunityStore over a pgvector table (id, metadata jsonb, document, embedding)."""

    def __init__(
        self,
        pool: asyncpg.Pool,
        *,
        table: str = COMMUNITIES_TABLE,
        embed: Callable[[list[str]], list[list[float]]] = generate_embeddings,
    ) -> None:
        self._pool = pool
        self._table = _identifier(table)
        self._embed = embed

    async def _fetch(self, sql: str, *args: Any) -> list[asyncpg.Record]:
        try:
            async with self._pool.acquire() as conn:
                return await conn.fetch(sql, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            logger.error("vector store request failed: %s", e)
            raise StoreTransportError(f"Vector store request failed: {e}") from e

    async def query_by_text(
        self, texts: Sequence[str], limit: int, where: WhereClause | None = None
    ) -> QueryResult:
        try:
            vectors = self._embed(list(texts))
        except Exception as e:
            logger.error("query embedding failed: %s", e)
            raise StoreTransportError(f"Vector store request failed: {e}") from e
        return await self.query_by_embedding(vectors, limit, where)

    async def query_by_embedding(
        self, vectors: Sequence[Sequence[float]], limit: int, where: WhereClause | None = None
    ) -> QueryResult:
        result = QueryResult()
        for vector in vectors:
            params: list[Any] = [_vector_literal(vector), limit]
            predicate = compile_where(where, params)
            # pgvector: <=> is cosine distance in [0, 2]; NULL when the row has no embedding.
            rows = await self._fetch(
                f"""
                SELECT id, metadata, embedding <=> $1::vector AS distance
                FROM {self._table}
                WHERE {predicate}
                ORDER BY distance ASC NULLS LAST
                LIMIT $2
                """,
                *params,
            )
            result.ids.append([r["id"] for r in rows])
            result.metadatas.append([_decode_json(r["metadata"]) for r in rows])
            result.distances.append(
                [None if r["distance"] is None else float(r["distance"]) for r in rows]
            )
        return result

    async def _get(self, predicate: str, params: list[Any]) -> GetResult:
        rows = await self._fetch(
            f"""
            SELECT id, metadata, embedding::text AS embedding
            FROM {self._table}
            WHERE {predicate}
            ORDER BY id
            """,
            *params,
        )
        return GetResult(
            ids=[r["id"] for r in rows],
            metadatas=[_decode_json(r["metadata"]) for r in rows],
            embeddings=[_decode_json(r["embedding"]) for r in rows],
        )

    async def get_by_id(self, ids: Sequence[str]) -> GetResult:
        return await self._get("id = ANY($1::text[])", [list(ids)])

    async def get_by_metadata(self, where: WhereClause) -> GetResult:
        params: list[Any] = []
        return await self._get(compile_where(where, params), params)

    async def close(self) -> None:
        await self._pool.close()
