"""Story service for creation and job scheduling."""

import logging
import uuid

from ...core.errors import InvalidTransitionError, NoPromptsError, NotFoundError
from ...core.status import StoryEvent, can_apply
from ..arq_pool import get_pool as get_arq_pool
from ..database.repository import StoryRepository
from ..models.requests import CreateStoryRequest
from ..models.responses import StoryResponse

logger = logging.getLogger(__name__)


class StoryService:
    """Service for creating stories and queueing their generation jobs."""

    def __init__(self, repo: StoryRepository):
        self.repo = repo

    async def create_story(self, owner_id: str, request: CreateStoryRequest) -> StoryResponse:
        """
        Create a draft story and queue content generation.

        Images are queued by the content job once text has been saved.

        Args:
            owner_id: Authenticated user creating the story
            request: Validated story metadata

        Returns:
            The stored draft story
        """
        story_id = str(uuid.uuid4())

        await self.repo.ensure_user(owner_id)
        await self.repo.create_story(
            story_id=story_id,
            owner_id=owner_id,
            title=request.title,
            description=request.description,
            age_group=request.age_group.value,
            language=request.language.value,
        )

        await self._enqueue("generate_content_task", story_id)
        return await self.repo.get_story(story_id)

    async def get_owned_story(self, story_id: str, owner_id: str) -> StoryResponse:
        """Load a story belonging to `owner_id`.

        Raises:
            NotFoundError: Story is missing or belongs to another user
        """
        story = await self.repo.get_story(story_id)
        if story is None or story.owner_id != owner_id:
            raise NotFoundError(story_id)
        return story

    async def request_content(self, story: StoryResponse) -> None:
        """Queue (re)generation of a story's text.

        Raises:
            InvalidTransitionError: Story status does not allow it
        """
        if not can_apply(story.status, StoryEvent.START_CONTENT):
            raise InvalidTransitionError(story.status.value, StoryEvent.START_CONTENT.value)
        await self._enqueue("generate_content_task", story.id)

    async def request_assets(self, story: StoryResponse) -> None:
        """Queue (re)generation of a story's images.

        Raises:
            NoPromptsError: Story content has no image prompts
            InvalidTransitionError: Story status does not allow it
        """
        if not story.image_prompts:
            raise NoPromptsError(story.id)
        if not can_apply(story.status, StoryEvent.START_ASSETS):
            raise InvalidTransitionError(story.status.value, StoryEvent.START_ASSETS.value)
        await self._enqueue("generate_assets_task", story.id)

    async def _enqueue(self, task: str, story_id: str) -> None:
        arq_pool = get_arq_pool()
        await arq_pool.enqueue_job(task, story_id=story_id)
        logger.info(f"Enqueued {task} for story {story_id}", extra={"story_id": story_id})
