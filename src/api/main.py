"""
FastAPI application: structured logging, error handlers, health and tool routes.
The communities store is built once at startup and shared through app.state.
"""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.errors import register_error_handlers
from src.api.routes import router as api_router
from src.config.settings import LOG_LEVEL
from src.services.db import open_store

# Structured logging: key-value style for machine parsing.
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the communities store on startup; close it on shutdown."""
    store = None
    try:
        store = await open_store()
    except Exception as e:
        logger.warning("Communities store not available: %s", e)
    app.state.store = store
    yield
    if store is not None:
        await store.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI app."""
    app = FastAPI(
        title="Discourse Community Discovery API",
        description="Semantic search over a directory of Discourse communities.",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_error_handlers(app)
    app.include_router(api_router, tags=["health", "tools"])
    logger.info("Application configured")
    return app


app = create_app()
