"""FastAPI dependency injection for services and repositories."""

from typing import Annotated, AsyncGenerator

import asyncpg
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.modules.content_generator import get_content_generator
from ..core.modules.image_generator import ImageGenerator, get_image_generator
from ..core.modules.object_store import get_object_store
from .auth.tokens import verify_token
from .database.db import get_pool
from .database.repository import StoryRepository
from .services.asset_pipeline import AssetPipeline
from .services.story_service import StoryService

# Security scheme for bearer token authentication
security = HTTPBearer(auto_error=False)


# Database connection dependency
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """Get a pooled asyncpg connection for the duration of a request."""
    async with get_pool().acquire() as conn:
        yield conn


# Repository - requires connection
def get_repository(
    conn: Annotated[asyncpg.Connection, Depends(get_connection)]
) -> StoryRepository:
    """Get a StoryRepository instance with injected connection."""
    return StoryRepository(conn)


# Service - depends on repository
def get_story_service(
    repo: Annotated[StoryRepository, Depends(get_repository)]
) -> StoryService:
    """Get a StoryService instance with injected repository."""
    return StoryService(repo)


def get_asset_pipeline() -> AssetPipeline:
    """Get a pipeline for inline work (single image retry)."""
    return AssetPipeline(
        pool=get_pool(),
        content_generator=get_content_generator(),
        image_generator=get_image_generator(),
        object_store=get_object_store(),
    )


def get_images() -> ImageGenerator:
    """Get the shared image generator."""
    return get_image_generator()


# Type aliases for cleaner route signatures
Repository = Annotated[StoryRepository, Depends(get_repository)]
Service = Annotated[StoryService, Depends(get_story_service)]
Pipeline = Annotated[AssetPipeline, Depends(get_asset_pipeline)]
Images = Annotated[ImageGenerator, Depends(get_images)]


# Authentication dependency
async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)]
) -> str:
    """Verify the bearer token and return the user subject.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    payload = verify_token(credentials.credentials) if credentials else None
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload["sub"]


# Type alias for authenticated user
CurrentUser = Annotated[str, Depends(get_current_user)]
