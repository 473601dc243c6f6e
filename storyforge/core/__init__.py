# Illustrated Story Service - Core Domain

# Re-export types for convenient access
from .types import (
    StoryChapter,
    StoryStructure,
    SceneDescription,
    StoryContent,
    StoryContext,
    GeneratedImage,
    GeneratedAsset,
    ImageRetryResult,
)
from .status import StoryStatus, StoryEvent, next_status

__all__ = [
    "StoryChapter",
    "StoryStructure",
    "SceneDescription",
    "StoryContent",
    "StoryContext",
    "GeneratedImage",
    "GeneratedAsset",
    "ImageRetryResult",
    "StoryStatus",
    "StoryEvent",
    "next_status",
]
