"""Pydantic models for API responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field

from ...core.status import PROCESSING_STATUSES
from ...core.types import image_prompts_from_content
from .enums import AgeGroup, AssetType, Language, StoryStatus


class AssetResponse(BaseModel):
    """A generated image attached to a story."""

    type: AssetType = AssetType.IMAGE
    url: str
    prompt: str
    sequence: int  # Index into the story's imagePrompts
    created_at: Optional[datetime] = None


class StoryResponse(BaseModel):
    """Full story response with content and assets."""

    id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    age_group: AgeGroup
    language: Language
    status: StoryStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Structured content (camelCase keys), or {error, timestamp} when status is error
    content: Optional[dict[str, Any]] = None

    # Ordered by sequence
    assets: list[AssetResponse] = Field(default_factory=list)

    @computed_field
    @property
    def is_processing(self) -> bool:
        """True while a pipeline step is running; clients poll until False."""
        return self.status in PROCESSING_STATUSES

    @property
    def image_prompts(self) -> list[str]:
        """Image prompts from the stored content, empty if there are none."""
        return image_prompts_from_content(self.content)


class StoryListResponse(BaseModel):
    """Paginated list of stories."""

    stories: list[StoryResponse]
    total: int
    limit: int
    offset: int


class JobAcceptedResponse(BaseModel):
    """Response when a generation job has been queued."""

    id: str
    status: StoryStatus
    message: str = Field(
        default="Generation queued. Poll GET /api/stories/{id} for status."
    )


class GenerateImageResponse(BaseModel):
    """Inline image preview."""

    data_url: str = Field(..., serialization_alias="dataUrl")


class ImageRetryResponse(BaseModel):
    """Per-item result of regenerating a single image."""

    index: int
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None
