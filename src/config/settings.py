"""
Configuration from environment. No inline config; DATABASE_URL and search limits from env.
Scoring breakpoints are fixed in src.services.scoring because callers depend on them.
"""

import os

from src.services.errors import ConfigurationError


def _float_env(name: str, default: float) -> float:
    """Read float from environment; return default if unset or invalid."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    """Read int from environment; return default if unset or invalid."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _str_env(name: str, default: str) -> str:
    raw = os.environ.get(name)
    return raw if raw else default


def get_database_url() -> str | None:
    """DATABASE_URL for PostgreSQL (with pgvector) holding the communities table."""
    return os.environ.get("DATABASE_URL")


def require_database_url() -> str:
    """Return DATABASE_URL or raise ConfigurationError naming the missing setting."""
    url = get_database_url()
    if not url:
        raise ConfigurationError(["DATABASE_URL"])
    return url


# DB connection timeout (seconds); all external calls must have timeouts.
DB_TIMEOUT_SEC: float = _float_env("DB_TIMEOUT_SEC", 5.0)

# Table with (id, metadata jsonb, document, embedding vector) per community.
COMMUNITIES_TABLE: str = _str_env("COMMUNITIES_TABLE", "discourse_sites")

# Stored community ids look like "discover_1376".
COMMUNITY_ID_PREFIX: str = _str_env("COMMUNITY_ID_PREFIX", "discover_")

SEARCH_LIMIT_DEFAULT: int = _int_env("SEARCH_LIMIT_DEFAULT", 10)
SEARCH_LIMIT_MAX: int = _int_env("SEARCH_LIMIT_MAX", 50)

# Confidence gap below which rerank falls through to engagement and activity.
RERANK_CONFIDENCE_BAND: float = _float_env("RERANK_CONFIDENCE_BAND", 0.1)

LOG_LEVEL: str = _str_env("LOG_LEVEL", "INFO").upper()
