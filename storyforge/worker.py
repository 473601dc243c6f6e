"""
ARQ worker for background story generation.

Run with: arq storyforge.worker.WorkerSettings
"""

import logging
from typing import Any

from arq import cron

from .api.arq_pool import get_redis_settings
from .api.config import LOG_FORMAT, validate_environment
from .api.database.db import close_pool, create_pool
from .api.database.repository import StoryRepository
from .api.logging import configure_logging
from .api.services.asset_pipeline import AssetPipeline
from .core.errors import GenerationInProgressError, InvalidTransitionError
from .core.modules.content_generator import get_content_generator
from .core.modules.image_generator import get_image_generator
from .core.modules.object_store import get_object_store

logger = logging.getLogger(__name__)

# Pipeline fence errors: another run owns the story, nothing to do
_SKIPPED = (GenerationInProgressError, InvalidTransitionError)


async def generate_content_task(ctx: dict[str, Any], story_id: str) -> dict[str, Any]:
    """
    ARQ task for generating a story's text.

    Thin wrapper around AssetPipeline.generate_content. On success the
    pipeline queues generate_assets_task itself.

    Returns:
        Dict with story_id and status
    """
    job_id = ctx.get("job_id", "unknown")
    logger.info(f"Starting content job {job_id} for story {story_id}")

    try:
        story = await ctx["pipeline"].generate_content(story_id)
    except _SKIPPED as e:
        logger.warning(f"Skipped content job {job_id}: {e}")
        return {"story_id": story_id, "status": "skipped"}
    except Exception as e:
        logger.error(f"Failed content job {job_id} for story {story_id}: {e}")
        # Re-raise so ARQ marks the job as failed
        raise

    logger.info(f"Completed content job {job_id} for story {story_id}")
    return {"story_id": story_id, "status": story.status.value}


async def generate_assets_task(ctx: dict[str, Any], story_id: str) -> dict[str, Any]:
    """
    ARQ task for generating a story's images.

    Thin wrapper around AssetPipeline.generate_assets.

    Returns:
        Dict with story_id and status
    """
    job_id = ctx.get("job_id", "unknown")
    logger.info(f"Starting assets job {job_id} for story {story_id}")

    try:
        story = await ctx["pipeline"].generate_assets(story_id)
    except _SKIPPED as e:
        logger.warning(f"Skipped assets job {job_id}: {e}")
        return {"story_id": story_id, "status": "skipped"}
    except Exception as e:
        logger.error(f"Failed assets job {job_id} for story {story_id}: {e}")
        raise

    logger.info(f"Completed assets job {job_id} for story {story_id}")
    return {"story_id": story_id, "status": story.status.value}


async def cleanup_stale_stories_task(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Cron task to fail stories stuck in a processing state.

    Runs every minute; a story is stale after 5 minutes in
    processing_content or 15 minutes in processing_assets.
    """
    try:
        async with ctx["db_pool"].acquire() as conn:
            count = await StoryRepository(conn).cleanup_stale_stories()
    except Exception as e:
        logger.error(f"Failed to cleanup stale stories: {e}")
        return {"cleaned_stories": 0, "error": str(e)}

    if count > 0:
        logger.info(f"Cleaned up {count} stale story job(s)")
    return {"cleaned_stories": count}


def _asset_scheduler(ctx: dict[str, Any]):
    """Build the callable the pipeline uses to queue asset generation."""

    async def schedule(story_id: str) -> None:
        await ctx["redis"].enqueue_job("generate_assets_task", story_id=story_id)

    return schedule


async def startup(ctx: dict[str, Any]) -> None:
    """Called when worker starts up."""
    validate_environment()
    configure_logging(json_format=LOG_FORMAT != "text")
    logger.info("ARQ worker starting up")

    ctx["db_pool"] = await create_pool()
    ctx["pipeline"] = AssetPipeline(
        pool=ctx["db_pool"],
        content_generator=get_content_generator(),
        image_generator=get_image_generator(),
        object_store=get_object_store(),
        schedule_assets=_asset_scheduler(ctx),
    )

    # Fail stories left mid-generation by a previous crash
    result = await cleanup_stale_stories_task(ctx)
    if result["cleaned_stories"] > 0:
        logger.info(f"Startup cleanup: marked {result['cleaned_stories']} stale story job(s) as failed")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Called when worker shuts down."""
    logger.info("ARQ worker shutting down")
    if ctx.get("db_pool") is not None:
        await close_pool()


class WorkerSettings:
    """ARQ worker configuration."""

    # Task functions to register
    functions = [generate_content_task, generate_assets_task]

    # Cron jobs for periodic maintenance
    cron_jobs = [
        cron(cleanup_stale_stories_task, minute=set(range(60))),
    ]

    # Lifecycle hooks
    on_startup = startup
    on_shutdown = shutdown

    # Redis connection settings
    redis_settings = get_redis_settings()

    # Job settings
    max_jobs = 2  # Each job may hold two image requests in flight
    job_timeout = 600  # 10 minutes max per job
    max_tries = 1  # Failures are recorded on the story; reruns go through the API
