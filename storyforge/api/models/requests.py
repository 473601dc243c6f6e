"""Pydantic models for API requests."""

from typing import Optional

from pydantic import BaseModel, Field

from .enums import AgeGroup, Language


class CreateStoryRequest(BaseModel):
    """Request body for creating a new story."""

    title: str = Field(
        ...,
        min_length=3,
        max_length=100,
        description="Story title",
        examples=["The Brave Fox"],
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional premise or notes for the story",
    )
    age_group: AgeGroup = Field(..., description="Target reader age group")
    language: Language = Field(default=Language.ENGLISH, description="Story language")


class GenerateImageRequest(BaseModel):
    """Request body for a one-off image preview."""

    prompt: str = Field(..., min_length=1, max_length=1000)


class RetryImageRequest(BaseModel):
    """Request body for regenerating a single story image."""

    prompt: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=1000,
        description="Prompt override; defaults to the story's stored prompt for this index",
    )
