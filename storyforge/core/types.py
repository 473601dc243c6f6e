"""
Centralized domain types for the illustrated story service.

All dataclasses that are used across multiple modules are defined here
to make data flow explicit and avoid circular imports.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Optional


# =============================================================================
# Story Content Types
# =============================================================================


@dataclass
class StoryChapter:
    """One chapter of the narrative."""

    title: str = ""
    content: str = ""
    mood: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "StoryChapter":
        return cls(
            title=str(data.get("title", "")),
            content=str(data.get("content", "")),
            mood=str(data.get("mood", "")),
        )

    def to_dict(self) -> dict:
        return {"title": self.title, "content": self.content, "mood": self.mood}


@dataclass
class StoryStructure:
    """Introduction, ordered chapters and conclusion."""

    introduction: str = ""
    chapters: list[StoryChapter] = field(default_factory=list)
    conclusion: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "StoryStructure":
        chapters = data.get("chapters") or []
        return cls(
            introduction=str(data.get("introduction", "")),
            chapters=[StoryChapter.from_dict(c) for c in chapters if isinstance(c, dict)],
            conclusion=str(data.get("conclusion", "")),
        )

    def to_dict(self) -> dict:
        return {
            "introduction": self.introduction,
            "chapters": [c.to_dict() for c in self.chapters],
            "conclusion": self.conclusion,
        }


@dataclass
class SceneDescription:
    """Visual description of a scene; `chapter` points into the structure."""

    chapter: int = 0
    setting: str = ""
    characters: list[str] = field(default_factory=list)
    action: str = ""
    mood: str = ""
    visual_details: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "SceneDescription":
        try:
            chapter = int(data.get("chapter", 0))
        except (TypeError, ValueError):
            chapter = 0
        characters = data.get("characters") or []
        return cls(
            chapter=chapter,
            setting=str(data.get("setting", "")),
            characters=[str(c) for c in characters] if isinstance(characters, list) else [],
            action=str(data.get("action", "")),
            mood=str(data.get("mood", "")),
            visual_details=str(data.get("visualDetails", "")),
        )

    def to_dict(self) -> dict:
        return {
            "chapter": self.chapter,
            "setting": self.setting,
            "characters": list(self.characters),
            "action": self.action,
            "mood": self.mood,
            "visualDetails": self.visual_details,
        }


@dataclass
class StoryContent:
    """Generated story content: structure, scenes and image prompts.

    Serialized with camelCase keys (`imagePrompts`, `visualDetails`) since
    that is the shape the model is asked to produce and the front end reads.
    Prompt *i* illustrates scene/chapter *i*.
    """

    structure: Optional[StoryStructure] = None
    scenes: list[SceneDescription] = field(default_factory=list)
    image_prompts: list[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "StoryContent":
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> "StoryContent":
        structure = data.get("structure")
        return cls(
            structure=StoryStructure.from_dict(structure) if isinstance(structure, dict) else None,
            scenes=[SceneDescription.from_dict(s) for s in data.get("scenes") or [] if isinstance(s, dict)],
            image_prompts=[str(p) for p in data.get("imagePrompts") or []],
        )

    def to_dict(self) -> dict:
        return {
            "structure": self.structure.to_dict() if self.structure else None,
            "scenes": [s.to_dict() for s in self.scenes],
            "imagePrompts": list(self.image_prompts),
        }


def image_prompts_from_content(content: Optional[dict[str, Any]]) -> list[str]:
    """Read the image prompt list out of a stored content payload.

    Returns an empty list for missing content, diagnostic error payloads and
    anything whose `imagePrompts` is not a list.
    """
    if not isinstance(content, dict):
        return []
    prompts = content.get("imagePrompts")
    if not isinstance(prompts, list):
        return []
    return [str(p) for p in prompts]


# =============================================================================
# Generation Types
# =============================================================================


@dataclass
class StoryContext:
    """The user-supplied fields a story is generated from."""

    title: str
    age_group: str
    language: str
    description: Optional[str] = None


@dataclass
class GeneratedImage:
    """Raw image returned by the image generator."""

    data: bytes
    content_type: str

    def to_data_url(self) -> str:
        """Encode as a data: URL for inline previews."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


@dataclass
class GeneratedAsset:
    """An uploaded image ready to be persisted as an asset row."""

    url: str
    prompt: str
    sequence: int
    type: str = "image"

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "url": self.url,
            "prompt": self.prompt,
            "sequence": self.sequence,
        }


@dataclass
class ImageRetryResult:
    """Outcome of regenerating a single image."""

    index: int
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None
