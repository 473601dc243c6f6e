"""Exception hierarchy for story generation."""

from typing import Iterable


class StoryForgeError(Exception):
    """Base class for all service errors."""


class ConfigurationError(StoryForgeError):
    """Required configuration is missing. Fatal at startup."""


class NotFoundError(StoryForgeError):
    """The requested story does not exist."""

    def __init__(self, story_id: str):
        self.story_id = story_id
        super().__init__(f"Story {story_id} not found")


class GenerationError(StoryForgeError):
    """The text model failed or returned unusable content."""


class ImageGenerationError(StoryForgeError):
    """Both the primary and the backup image model failed for one prompt."""


class StorageError(StoryForgeError):
    """An object store operation failed."""


class NoPromptsError(StoryForgeError):
    """Asset generation was requested for a story without image prompts."""

    def __init__(self, story_id: str):
        self.story_id = story_id
        super().__init__(f"Story {story_id} has no image prompts")


class InvalidTransitionError(StoryForgeError):
    """A status change not allowed by the story state machine."""

    def __init__(self, current: str, event: str):
        self.current = current
        self.event = event
        super().__init__(f"Cannot apply '{event}' to a story in status '{current}'")


class GenerationInProgressError(StoryForgeError):
    """Another pipeline run changed the story status first."""

    def __init__(self, story_id: str):
        self.story_id = story_id
        super().__init__(f"Story {story_id} is already being generated")


class AssetGenerationError(StoryForgeError):
    """One or more images of a story failed. Carries every per-prompt message."""

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__(
            f"Failed to generate {len(self.errors)} image(s): " + "; ".join(self.errors)
        )
