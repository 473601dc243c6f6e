"""
Image generation configuration for the illustrated story service.

Scene illustrations come from Gemini image models. A primary model is tried
first and a backup model second, both with the same generation config.
"""

import base64
import os

from dotenv import load_dotenv
from google import genai
from google.genai.types import GenerateContentConfig, Modality

# Load environment variables from .env file
load_dotenv()

# Image generation constants
IMAGE_CONSTANTS = {
    "model": "gemini-3-pro-image-preview",
    "backup_model": "gemini-2.5-flash-image",
    "temperature": 0.4,
    "default_content_type": "image/jpeg",
}


def get_image_client() -> genai.Client:
    """
    Get the Gemini client for illustration generation.

    Uses GOOGLE_IMAGE_API_KEY, falling back to GOOGLE_API_KEY.
    """
    api_key = os.getenv("GOOGLE_IMAGE_API_KEY") or os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise ValueError(
            "GOOGLE_IMAGE_API_KEY / GOOGLE_API_KEY not found in environment. Set it in .env file."
        )

    return genai.Client(api_key=api_key)


def get_image_model() -> str:
    """Get the primary image model ID."""
    return IMAGE_CONSTANTS["model"]


def get_backup_image_model() -> str:
    """Get the backup image model ID."""
    return IMAGE_CONSTANTS["backup_model"]


def get_image_config() -> GenerateContentConfig:
    """Get the config shared by the primary and backup image models."""
    return GenerateContentConfig(
        response_modalities=[Modality.IMAGE],
        temperature=IMAGE_CONSTANTS["temperature"],
    )


def extract_image_from_response(response) -> tuple[bytes, str]:
    """
    Extract image bytes and MIME type from a Gemini API response.

    Args:
        response: The response from genai.Client.aio.models.generate_content()

    Returns:
        Tuple of (image bytes, content type)

    Raises:
        ValueError: If no image found in response
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        raise ValueError("No image found in response")

    for part in candidates[0].content.parts or []:
        if hasattr(part, "inline_data") and part.inline_data:
            data = part.inline_data.data
            content_type = part.inline_data.mime_type or IMAGE_CONSTANTS["default_content_type"]
            return (base64.b64decode(data) if isinstance(data, str) else data), content_type

    raise ValueError("No image found in response")
