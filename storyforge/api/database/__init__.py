"""Database module for story persistence."""

from .db import Base, close_pool, create_pool, engine, get_pool, init_db
from .models import Story, StoryAsset, User
from .repository import StoryRepository

__all__ = [
    # Connection management
    "init_db",
    "create_pool",
    "get_pool",
    "close_pool",
    "engine",
    "Base",
    # Models
    "User",
    "Story",
    "StoryAsset",
    # Repositories
    "StoryRepository",
]
