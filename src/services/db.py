"""
Store bootstrap: open the asyncpg pool for the communities table with a command timeout.
"""

import logging

import asyncpg

from src.config.settings import COMMUNITIES_TABLE, DB_TIMEOUT_SEC, get_database_url
from src.services.storage import PgCommunityStore

logger = logging.getLogger(__name__)


async def open_store() -> PgCommunityStore | None:
    """
    Connect to DATABASE_URL and return a store over COMMUNITIES_TABLE.
    Returns None when DATABASE_URL is unset; searches then report the missing setting.
    """
    url = get_database_url()
    if not url:
        logger.warning("DATABASE_URL not set; community search will report a configuration error")
        return None
    pool = await asyncpg.create_pool(
        url,
        min_size=1,
        max_size=10,
        command_timeout=DB_TIMEOUT_SEC,
    )
    logger.info("Opened communities store on table %s", COMMUNITIES_TABLE)
    return PgCommunityStore(pool, table=COMMUNITIES_TABLE)
