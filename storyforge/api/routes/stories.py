"""Story CRUD and generation endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Query, Response, status

from ...core.errors import (
    InvalidTransitionError,
    NoPromptsError,
    NotFoundError,
)
from ..dependencies import CurrentUser, Pipeline, Repository, Service
from ..models.requests import CreateStoryRequest, RetryImageRequest
from ..models.responses import (
    ImageRetryResponse,
    JobAcceptedResponse,
    StoryListResponse,
    StoryResponse,
)

router = APIRouter()


def _not_found(story_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Story {story_id} not found",
    )


async def _owned_story(service, story_id: str, user: str) -> StoryResponse:
    try:
        return await service.get_owned_story(story_id, user)
    except NotFoundError:
        raise _not_found(story_id)


@router.post(
    "",
    response_model=StoryResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Create a new story",
    description="Create a draft story and queue text generation. Poll GET /api/stories/{id} for status.",
)
async def create_story(request: CreateStoryRequest, service: Service, user: CurrentUser):
    """Create a draft story and queue its content job."""
    return await service.create_story(user, request)


@router.get(
    "",
    response_model=StoryListResponse,
    summary="List stories",
    description="Get a paginated list of the caller's stories, newest first.",
)
async def list_stories(
    repo: Repository,
    user: CurrentUser,
    limit: int = Query(default=20, ge=1, le=100, description="Maximum number of stories to return"),
    offset: int = Query(default=0, ge=0, description="Number of stories to skip"),
):
    """List the caller's stories with pagination."""
    stories, total = await repo.list_stories(owner_id=user, limit=limit, offset=offset)

    return StoryListResponse(
        stories=stories,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{story_id}",
    response_model=StoryResponse,
    summary="Get a story",
    description="Get a story with its assets. Poll this endpoint to check generation status.",
)
async def get_story(story_id: str, service: Service, user: CurrentUser):
    """Get a story by ID."""
    return await _owned_story(service, story_id, user)


@router.delete(
    "/{story_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a story",
)
async def delete_story(story_id: str, service: Service, repo: Repository, user: CurrentUser):
    """Delete a story and its asset rows."""
    await _owned_story(service, story_id, user)

    if not await repo.delete_story(story_id):
        raise _not_found(story_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{story_id}/generate",
    response_model=JobAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Generate story content",
    description="Queue text generation for a draft story, or retry one that failed.",
)
async def generate_content(story_id: str, service: Service, user: CurrentUser):
    """Queue content generation."""
    story = await _owned_story(service, story_id, user)

    try:
        await service.request_content(story)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return JobAcceptedResponse(id=story.id, status=story.status)


@router.post(
    "/{story_id}/assets",
    response_model=JobAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Generate story images",
    description="Queue image generation for every image prompt of the story.",
)
async def generate_assets(story_id: str, service: Service, user: CurrentUser):
    """Queue asset generation."""
    story = await _owned_story(service, story_id, user)

    try:
        await service.request_assets(story)
    except NoPromptsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return JobAcceptedResponse(id=story.id, status=story.status)


@router.post(
    "/{story_id}/images/{index}/retry",
    response_model=ImageRetryResponse,
    summary="Regenerate one image",
    description="Regenerate the image for one prompt and replace its asset. Story status is unchanged.",
)
async def retry_image(
    story_id: str,
    service: Service,
    pipeline: Pipeline,
    user: CurrentUser,
    index: int = Path(..., ge=0, description="Zero-based image prompt index"),
    request: Optional[RetryImageRequest] = None,
):
    """Regenerate a single image inline."""
    await _owned_story(service, story_id, user)

    try:
        result = await pipeline.retry_image(
            story_id,
            index,
            prompt=request.prompt if request else None,
        )
    except NotFoundError:
        raise _not_found(story_id)

    return ImageRetryResponse(
        index=result.index,
        success=result.success,
        url=result.url,
        error=result.error,
    )
