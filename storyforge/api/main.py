"""FastAPI application for the illustrated story service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from .arq_pool import close_pool as close_arq_pool
from .arq_pool import open_pool as open_arq_pool
from .config import DATABASE_URL, LOG_FORMAT, REDIS_URL, validate_environment
from .logging import configure_logging
from .routes import generate, stories

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    validate_environment()
    configure_logging(json_format=LOG_FORMAT != "text")

    # Startup: Initialize database (only if DATABASE_URL is configured)
    if DATABASE_URL:
        from .database.db import close_pool, create_pool, init_db

        await init_db()
        await create_pool()
        logger.info("Database initialized")
    else:
        logger.warning("DATABASE_URL not set - database not initialized")

    if REDIS_URL:
        await open_arq_pool()
        logger.info("ARQ pool connected")
    else:
        logger.warning("REDIS_URL not set - generation jobs cannot be queued")

    yield

    # Shutdown
    await close_arq_pool()
    if DATABASE_URL:
        await close_pool()


app = FastAPI(
    title="Illustrated Story Service API",
    description="""
Generate illustrated children's stories from a title and a short description.

## Workflow
1. POST `/api/stories` with title, age group and language
2. Poll GET `/api/stories/{id}` until status is `generated` or `error`
3. Retry failed steps with `/generate`, `/assets` or a single image retry
    """,
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(stories.router, prefix="/api/stories", tags=["Stories"])
app.include_router(generate.router, prefix="/api/generate", tags=["Generate"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
