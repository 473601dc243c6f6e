"""
Configuration module for the illustrated story service.

Re-exports all configuration for convenient access.
"""

from .llm import LLM_CONSTANTS, get_text_client, get_text_model, get_text_config
from .story import STORY_CONSTANTS
from .storage import STORAGE_CONSTANTS, get_storage_settings
from .image import (
    IMAGE_CONSTANTS,
    get_image_client,
    get_image_model,
    get_backup_image_model,
    get_image_config,
    extract_image_from_response,
)

__all__ = [
    # LLM
    "LLM_CONSTANTS",
    "get_text_client",
    "get_text_model",
    "get_text_config",
    # Story
    "STORY_CONSTANTS",
    # Storage
    "STORAGE_CONSTANTS",
    "get_storage_settings",
    # Image
    "IMAGE_CONSTANTS",
    "get_image_client",
    "get_image_model",
    "get_backup_image_model",
    "get_image_config",
    "extract_image_from_response",
]
