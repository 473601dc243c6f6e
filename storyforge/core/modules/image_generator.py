"""
Module for generating scene illustrations with Gemini image models.

Each prompt gets at most two attempts: the primary model, then the backup
model with the same config. There is no backoff between them.
"""

import logging
from typing import Optional

from google import genai

from storyforge.config import (
    extract_image_from_response,
    get_backup_image_model,
    get_image_client,
    get_image_config,
    get_image_model,
)
from ..errors import ImageGenerationError
from ..types import GeneratedImage

logger = logging.getLogger(__name__)


class ImageGenerator:
    """
    Generate one image per prompt with primary/backup model fallback.

    The client is stateless after construction and safe to share between
    concurrent tasks, so a single instance serves the whole process.
    """

    def __init__(
        self,
        client: Optional[genai.Client] = None,
        model: Optional[str] = None,
        backup_model: Optional[str] = None,
    ):
        self.client = client or get_image_client()
        self.model = model or get_image_model()
        self.backup_model = backup_model or get_backup_image_model()
        self.config = get_image_config()

    async def _generate_with_model(self, prompt: str, model: str) -> GeneratedImage:
        """Run a single generation against `model`."""
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=self.config,
        )
        data, content_type = extract_image_from_response(response)
        return GeneratedImage(data=data, content_type=content_type)

    async def generate(self, prompt: str) -> GeneratedImage:
        """
        Generate an image for a prompt.

        Args:
            prompt: Scene description to illustrate

        Returns:
            GeneratedImage with raw bytes and content type

        Raises:
            ImageGenerationError: If both the primary and backup model fail
        """
        try:
            return await self._generate_with_model(prompt, self.model)
        except Exception as primary_error:
            logger.warning(
                f"Primary image model failed, trying backup model: {primary_error}",
                extra={"error_type": type(primary_error).__name__},
            )

        try:
            return await self._generate_with_model(prompt, self.backup_model)
        except Exception as backup_error:
            logger.error(f"Backup image model failed: {backup_error}")
            raise ImageGenerationError(
                "Image generation failed with both primary and backup models"
            ) from None

    async def generate_data_url(self, prompt: str) -> str:
        """Generate an image and return it as a data: URL."""
        image = await self.generate(prompt)
        return image.to_data_url()


# Process-wide instance, created on first use
_image_generator: Optional[ImageGenerator] = None


def get_image_generator() -> ImageGenerator:
    """Get the shared ImageGenerator."""
    global _image_generator
    if _image_generator is None:
        _image_generator = ImageGenerator()
    return _image_generator
