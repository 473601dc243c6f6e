"""
Story generation pipeline.

Drives a story through its status state machine:

    draft -> processing_content -> generated_content
          -> processing_assets -> generated | error

Content is produced by one text-model call. Images are produced in chunks of
`chunk_size` concurrent requests; a chunk must settle completely before the
next one starts, and a failed image never cancels its sibling or aborts the
run. Every status change goes through `next_status` and a conditional update,
so a second run for the same story fails fast instead of duplicating work.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, Optional

import asyncpg

from ...config import STORY_CONSTANTS
from ...core.errors import (
    AssetGenerationError,
    GenerationInProgressError,
    NoPromptsError,
    NotFoundError,
)
from ...core.modules.content_generator import ContentGenerator
from ...core.modules.image_generator import ImageGenerator
from ...core.modules.object_store import ObjectStore, extension_for
from ...core.status import StoryEvent, StoryStatus, next_status
from ...core.types import GeneratedAsset, ImageRetryResult, StoryContext
from ..database.repository import StoryRepository
from ..logging import story_logger
from ..models.responses import StoryResponse

logger = logging.getLogger(__name__)

# Called with a story id to queue asset generation after content is saved
AssetScheduler = Callable[[str], Awaitable[None]]


class AssetPipeline:
    """
    Orchestrates content and image generation for a story.

    Args:
        pool: asyncpg pool; each persistence step acquires its own connection
        content_generator: Text model client
        image_generator: Shared image model client
        object_store: Shared S3 client
        schedule_assets: Queues asset generation after content succeeds.
            When omitted, asset generation runs inline right away.
        chunk_size: Max concurrent image requests
    """

    def __init__(
        self,
        pool: asyncpg.Pool,
        content_generator: ContentGenerator,
        image_generator: ImageGenerator,
        object_store: ObjectStore,
        schedule_assets: Optional[AssetScheduler] = None,
        chunk_size: int = STORY_CONSTANTS["image_chunk_size"],
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.pool = pool
        self.content_generator = content_generator
        self.image_generator = image_generator
        self.object_store = object_store
        self.schedule_assets = schedule_assets
        self.chunk_size = chunk_size

    @asynccontextmanager
    async def _repository(self) -> AsyncGenerator[StoryRepository, None]:
        async with self.pool.acquire() as conn:
            yield StoryRepository(conn)

    async def _load(self, story_id: str) -> StoryResponse:
        async with self._repository() as repo:
            story = await repo.get_story(story_id)
        if story is None:
            raise NotFoundError(story_id)
        return story

    async def _begin(self, story: StoryResponse, event: StoryEvent) -> StoryStatus:
        """Move the story into a processing state, fenced on its current status."""
        target = next_status(story.status, event)
        if story.status == StoryStatus.ERROR:
            story_logger.retry_attempt(story.id, "content" if event == StoryEvent.START_CONTENT else "assets")
        async with self._repository() as repo:
            moved = await repo.transition_status(story.id, [story.status], target)
        if not moved:
            raise GenerationInProgressError(story.id)
        story_logger.status_changed(story.id, target.value)
        return target

    # === CONTENT ===

    async def generate_content(self, story_id: str) -> StoryResponse:
        """
        Generate and persist text content for a story, then queue its images.

        Returns:
            The story as stored after content generation

        Raises:
            NotFoundError: Story does not exist
            InvalidTransitionError: Story status does not allow content generation
            GenerationInProgressError: Another run moved the story first
            GenerationError: The text model failed; the story is left in error
        """
        story = await self._load(story_id)
        await self._begin(story, StoryEvent.START_CONTENT)

        start_time = time.time()
        story_logger.generation_started(story_id, "content")

        try:
            content = await self.content_generator.generate(
                StoryContext(
                    title=story.title,
                    description=story.description,
                    age_group=story.age_group.value,
                    language=story.language.value,
                )
            )
            status = next_status(StoryStatus.PROCESSING_CONTENT, StoryEvent.CONTENT_READY)
            async with self._repository() as repo:
                await repo.save_content(story_id, content, status)
        except Exception as e:
            story_logger.generation_failed(story_id, e, "content")
            await self._record_content_failure(story_id, str(e))
            raise

        story_logger.generation_completed(story_id, "content", time.time() - start_time)
        story_logger.status_changed(story_id, status.value)

        await self._start_assets(story_id)
        return await self._load(story_id)

    async def _record_content_failure(self, story_id: str, message: str) -> None:
        try:
            async with self._repository() as repo:
                await repo.mark_error(story_id, message)
            story_logger.status_changed(story_id, StoryStatus.ERROR.value)
        except Exception as e:
            logger.error(f"Could not record content failure for story {story_id}: {e}")

    async def _start_assets(self, story_id: str) -> None:
        """Queue (or run) asset generation. Failures here never reach the caller."""
        try:
            if self.schedule_assets is not None:
                await self.schedule_assets(story_id)
                logger.info(f"Queued asset generation for story {story_id}")
            else:
                await self.generate_assets(story_id)
        except Exception as e:
            logger.warning(
                f"Asset generation for story {story_id} did not complete: {e}",
                extra={"story_id": story_id, "error_type": type(e).__name__},
            )

    # === ASSETS ===

    async def generate_assets(self, story_id: str) -> StoryResponse:
        """
        Generate, upload and persist one image per stored image prompt.

        Returns:
            The story as stored, status `generated`

        Raises:
            NotFoundError: Story does not exist
            NoPromptsError: Story content has no image prompts
            InvalidTransitionError: Story status does not allow asset generation
            GenerationInProgressError: Another run moved the story first
            AssetGenerationError: One or more images failed; successful ones
                are persisted and the story is left in error
        """
        story = await self._load(story_id)
        prompts = story.image_prompts
        if not prompts:
            raise NoPromptsError(story_id)

        await self._begin(story, StoryEvent.START_ASSETS)

        start_time = time.time()
        story_logger.generation_started(story_id, "assets")

        try:
            assets, errors = await self._generate_images(story_id, prompts)

            if assets:
                async with self._repository() as repo:
                    await repo.save_assets(story_id, assets)

            event = StoryEvent.FAIL if errors else StoryEvent.ASSETS_READY
            status = next_status(StoryStatus.PROCESSING_ASSETS, event)
            async with self._repository() as repo:
                await repo.update_status(story_id, status)
            story_logger.status_changed(story_id, status.value)
        except Exception as e:
            story_logger.generation_failed(story_id, e, "assets")
            await self._force_error(story_id)
            raise

        if errors:
            error = AssetGenerationError(errors)
            story_logger.generation_failed(story_id, error, "assets")
            raise error

        story_logger.generation_completed(story_id, "assets", time.time() - start_time)
        return await self._load(story_id)

    async def _force_error(self, story_id: str) -> None:
        try:
            async with self._repository() as repo:
                await repo.update_status(story_id, StoryStatus.ERROR)
            story_logger.status_changed(story_id, StoryStatus.ERROR.value)
        except Exception as e:
            logger.error(f"Could not mark story {story_id} as failed: {e}")

    async def _generate_images(
        self,
        story_id: str,
        prompts: list[str],
    ) -> tuple[list[GeneratedAsset], list[str]]:
        """Run prompts in sequential chunks; each chunk's prompts run concurrently."""
        assets: list[GeneratedAsset] = []
        errors: list[str] = []
        indexed = list(enumerate(prompts))
        total = len(indexed)

        for chunk_start in range(0, total, self.chunk_size):
            chunk = indexed[chunk_start:chunk_start + self.chunk_size]
            results = await asyncio.gather(
                *(self._generate_one(story_id, index, prompt) for index, prompt in chunk)
            )

            for asset, error in results:
                if asset is not None:
                    assets.append(asset)
                else:
                    errors.append(error)

            story_logger.stage_completed(
                story_id, f"images {min(chunk_start + self.chunk_size, total)}/{total}"
            )

        return assets, errors

    async def _generate_one(
        self,
        story_id: str,
        index: int,
        prompt: str,
    ) -> tuple[Optional[GeneratedAsset], Optional[str]]:
        """Generate and upload one image. Never raises; returns (asset, error)."""
        try:
            image = await self.image_generator.generate(prompt)
            url = await self.object_store.upload(
                image.data,
                image.content_type,
                folder=f"{STORY_CONSTANTS['image_folder']}/{story_id}",
                filename=f"image-{index}.{extension_for(image.content_type)}",
            )
        except Exception as e:
            story_logger.image_failed(story_id, index, e)
            return None, f"Image {index + 1}: {e}"

        return GeneratedAsset(url=url, prompt=prompt, sequence=index), None

    # === SINGLE IMAGE RETRY ===

    async def retry_image(
        self,
        story_id: str,
        index: int,
        prompt: Optional[str] = None,
    ) -> ImageRetryResult:
        """
        Regenerate the image at `index` and replace its asset row.

        Story status is left untouched. `prompt` overrides the stored prompt.

        Raises:
            NotFoundError: Story does not exist
        """
        story = await self._load(story_id)

        if prompt is None:
            prompts = story.image_prompts
            if not 0 <= index < len(prompts):
                return ImageRetryResult(
                    index=index,
                    success=False,
                    error=f"No image prompt at index {index}",
                )
            prompt = prompts[index]

        asset, error = await self._generate_one(story_id, index, prompt)
        if asset is None:
            return ImageRetryResult(index=index, success=False, error=error)

        async with self._repository() as repo:
            await repo.save_assets(story_id, [asset])

        logger.info(f"Regenerated image {index + 1} for story {story_id}")
        return ImageRetryResult(index=index, success=True, url=asset.url)
