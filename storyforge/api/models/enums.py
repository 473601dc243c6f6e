"""Shared enums for API models."""

from enum import Enum

from ...core.status import StoryStatus


class AgeGroup(str, Enum):
    """Target reader age group."""

    TODDLER = "3-5"
    EARLY_READER = "5-8"
    MIDDLE_GRADE = "8-12"


class Language(str, Enum):
    """Language the story is written in."""

    ENGLISH = "en"
    SPANISH = "es"
    FRENCH = "fr"


class AssetType(str, Enum):
    """Kind of generated asset."""

    IMAGE = "image"


__all__ = ["AgeGroup", "Language", "AssetType", "StoryStatus"]
