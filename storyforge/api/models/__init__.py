"""Pydantic models for API requests and responses."""

from .enums import AgeGroup, AssetType, Language, StoryStatus
from .requests import CreateStoryRequest, GenerateImageRequest, RetryImageRequest
from .responses import (
    AssetResponse,
    GenerateImageResponse,
    ImageRetryResponse,
    JobAcceptedResponse,
    StoryListResponse,
    StoryResponse,
)

__all__ = [
    "AgeGroup",
    "AssetType",
    "Language",
    "StoryStatus",
    "CreateStoryRequest",
    "GenerateImageRequest",
    "RetryImageRequest",
    "AssetResponse",
    "GenerateImageResponse",
    "ImageRetryResponse",
    "JobAcceptedResponse",
    "StoryListResponse",
    "StoryResponse",
]
