"""Services for story generation."""

from .asset_pipeline import AssetPipeline
from .story_service import StoryService

__all__ = ["AssetPipeline", "StoryService"]
