"""Repository for story CRUD operations using raw asyncpg SQL."""

import json
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import asyncpg

from ...config import STORY_CONSTANTS
from ...core.status import StoryStatus
from ...core.types import GeneratedAsset, StoryContent
from ..models.enums import AgeGroup, AssetType, Language
from ..models.responses import AssetResponse, StoryResponse


def _status_value(status) -> str:
    return status.value if isinstance(status, StoryStatus) else str(status)


class StoryRepository:
    """Repository for story persistence operations."""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def ensure_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        """Create the user row if it does not exist yet."""
        await self.conn.execute(
            """
            INSERT INTO users (id, email, name)
            VALUES ($1, $2, $3)
            ON CONFLICT (id) DO NOTHING
            """,
            user_id,
            email,
            name,
        )

    async def create_story(
        self,
        story_id: str,
        owner_id: str,
        title: str,
        age_group: str,
        language: str,
        description: Optional[str] = None,
    ) -> None:
        """Create a new story record in draft status with empty content."""
        await self.conn.execute(
            """
            INSERT INTO stories (id, owner_id, title, description, age_group, language, status, content_json)
            VALUES ($1, $2, $3, $4, $5, $6, 'draft', $7)
            """,
            story_id,
            owner_id,
            title,
            description,
            age_group,
            language,
            json.dumps(StoryContent.empty().to_dict()),
        )

    async def get_story(self, story_id: str) -> Optional[StoryResponse]:
        """Get a story by ID with its assets ordered by sequence."""
        story = await self.conn.fetchrow(
            "SELECT * FROM stories WHERE id = $1",
            story_id,
        )
        if not story:
            return None

        assets = await self.conn.fetch(
            """
            SELECT * FROM story_assets
            WHERE story_id = $1
            ORDER BY sequence
            """,
            story_id,
        )

        return self._record_to_response(story, assets)

    async def list_stories(
        self,
        owner_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[StoryResponse], int]:
        """List an owner's stories, newest first."""
        total = await self.conn.fetchval(
            "SELECT COUNT(*) FROM stories WHERE owner_id = $1",
            owner_id,
        )
        stories = await self.conn.fetch(
            """
            SELECT * FROM stories
            WHERE owner_id = $1
            ORDER BY created_at DESC
            LIMIT $2 OFFSET $3
            """,
            owner_id,
            limit,
            offset,
        )

        return [self._record_to_response(s) for s in stories], total or 0

    async def delete_story(self, story_id: str) -> bool:
        """Delete a story and its assets (cascades via FK)."""
        result = await self.conn.execute(
            "DELETE FROM stories WHERE id = $1",
            story_id,
        )
        # Result is like "DELETE 1" or "DELETE 0"
        return result.split()[-1] != "0"

    async def transition_status(
        self,
        story_id: str,
        expected: Iterable,
        status,
    ) -> bool:
        """Set status only if the current status is one of `expected`.

        Returns:
            True if the row was updated, False if another writer got there first
        """
        result = await self.conn.execute(
            """
            UPDATE stories
            SET status = $2, updated_at = now()
            WHERE id = $1 AND status = ANY($3::text[])
            """,
            story_id,
            _status_value(status),
            [_status_value(s) for s in expected],
        )
        return result.split()[-1] != "0"

    async def update_status(self, story_id: str, status) -> None:
        """Unconditionally set story status."""
        await self.conn.execute(
            "UPDATE stories SET status = $2, updated_at = now() WHERE id = $1",
            story_id,
            _status_value(status),
        )

    async def save_content(self, story_id: str, content: StoryContent, status) -> None:
        """Persist generated content together with the new status.

        Assets from earlier content are removed in the same transaction, since
        their prompts no longer match the new `imagePrompts`.
        """
        async with self.conn.transaction():
            await self.conn.execute(
                "DELETE FROM story_assets WHERE story_id = $1",
                story_id,
            )
            await self.conn.execute(
                """
                UPDATE stories
                SET content_json = $2, status = $3, updated_at = now()
                WHERE id = $1
                """,
                story_id,
                json.dumps(content.to_dict()),
                _status_value(status),
            )

    async def mark_error(self, story_id: str, message: str) -> None:
        """Set status to error and replace content with a diagnostic payload."""
        diagnostic = {
            "error": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        await self.conn.execute(
            """
            UPDATE stories
            SET status = 'error', content_json = $2, updated_at = now()
            WHERE id = $1
            """,
            story_id,
            json.dumps(diagnostic),
        )

    async def save_assets(self, story_id: str, assets: list[GeneratedAsset]) -> None:
        """Batch upsert asset rows in one transaction.

        A row for an existing (story_id, sequence) is replaced, so retries
        never leave two images for the same prompt.
        """
        if not assets:
            return

        asset_data = [(story_id, a.type, a.url, a.prompt, a.sequence) for a in assets]
        async with self.conn.transaction():
            await self.conn.executemany(
                """
                INSERT INTO story_assets (story_id, type, url, prompt, sequence)
                VALUES ($1, $2, $3, $4, $5)
                ON CONFLICT (story_id, sequence)
                DO UPDATE SET type = EXCLUDED.type, url = EXCLUDED.url,
                              prompt = EXCLUDED.prompt, created_at = now()
                """,
                asset_data,
            )

    async def cleanup_stale_stories(self) -> int:
        """Fail stories stuck in a processing state past their timeout.

        Returns:
            Number of stories moved to error
        """
        now = datetime.now(timezone.utc)
        content_cutoff = now - timedelta(minutes=STORY_CONSTANTS["stale_content_minutes"])
        assets_cutoff = now - timedelta(minutes=STORY_CONSTANTS["stale_assets_minutes"])
        diagnostic = json.dumps({
            "error": "Generation timed out",
            "timestamp": now.isoformat(),
        })

        result = await self.conn.execute(
            """
            UPDATE stories
            SET status = 'error',
                content_json = CASE WHEN status = 'processing_content' THEN $3 ELSE content_json END,
                updated_at = now()
            WHERE (status = 'processing_content' AND updated_at < $1)
               OR (status = 'processing_assets' AND updated_at < $2)
            """,
            content_cutoff,
            assets_cutoff,
            diagnostic,
        )
        # Result is like "UPDATE 3"
        return int(result.split()[-1])

    def _record_to_response(
        self,
        story: asyncpg.Record,
        assets: Optional[list[asyncpg.Record]] = None,
    ) -> StoryResponse:
        """Convert asyncpg Record to response model."""
        content = None
        if story["content_json"]:
            content = json.loads(story["content_json"])

        asset_responses = [
            AssetResponse(
                type=AssetType(a["type"]),
                url=a["url"],
                prompt=a["prompt"],
                sequence=a["sequence"],
                created_at=a["created_at"],
            )
            for a in assets or []
        ]

        return StoryResponse(
            id=story["id"],
            owner_id=story["owner_id"],
            title=story["title"],
            description=story["description"],
            age_group=AgeGroup(story["age_group"]),
            language=Language(story["language"]),
            status=StoryStatus(story["status"]),
            created_at=story["created_at"],
            updated_at=story["updated_at"],
            content=content,
            assets=asset_responses,
        )
