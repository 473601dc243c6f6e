"""Inline generation endpoints (no persistence)."""

import logging

from fastapi import APIRouter, HTTPException, status

from ...core.errors import ImageGenerationError
from ..dependencies import CurrentUser, Images
from ..models.requests import GenerateImageRequest
from ..models.responses import GenerateImageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/image",
    response_model=GenerateImageResponse,
    summary="Generate an image preview",
    description="Generate one image from a prompt and return it as a data URL. Nothing is stored.",
)
async def generate_image(request: GenerateImageRequest, images: Images, user: CurrentUser):
    """Generate an image and return it inline."""
    try:
        data_url = await images.generate_data_url(request.prompt)
    except ImageGenerationError as e:
        logger.error(f"Image preview failed for user {user}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return GenerateImageResponse(data_url=data_url)
