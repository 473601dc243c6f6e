"""Tests for story text generation and JSON cleaning."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from storyforge.core.errors import GenerationError
from storyforge.core.modules.content_generator import (
    JSON_ONLY_DIRECTIVE,
    ContentGenerator,
    build_story_prompt,
    clean_json_response,
    parse_story_content,
)
from storyforge.core.types import StoryContent, StoryContext

from .factories import SAMPLE_CONTENT

VALID_JSON = json.dumps(SAMPLE_CONTENT)


def make_client(text=None, error=None):
    """Create a mock genai client whose generate_content returns `text`."""
    client = MagicMock()
    if error is not None:
        client.aio.models.generate_content = AsyncMock(side_effect=error)
    else:
        response = MagicMock()
        response.text = text
        client.aio.models.generate_content = AsyncMock(return_value=response)
    return client


class TestCleanJsonResponse:
    """Tests for clean_json_response."""

    def test_valid_json_is_returned_unchanged(self):
        assert clean_json_response(VALID_JSON) == VALID_JSON

    def test_cleaning_is_idempotent(self):
        wrapped = f"Sure! Here is your story:\n{VALID_JSON}\nEnjoy."
        once = clean_json_response(wrapped)

        assert clean_json_response(once) == once

    def test_extracts_object_from_surrounding_prose(self):
        result = clean_json_response('Here you go: {"a": 1} hope that helps')

        assert json.loads(result) == {"a": 1}

    def test_straightens_smart_quotes(self):
        result = clean_json_response("{“title”: “Fox”}")

        assert json.loads(result) == {"title": "Fox"}

    def test_collapses_blank_lines(self):
        result = clean_json_response("{“a”: 1,\n\n\n“b”: 2}")

        assert json.loads(result) == {"a": 1, "b": 2}

    def test_raises_when_no_json_found(self):
        with pytest.raises(GenerationError, match="No valid JSON found in response"):
            clean_json_response("I cannot write that story.")

    def test_raises_on_unrecoverable_object(self):
        with pytest.raises(GenerationError):
            clean_json_response("{not: valid, json")


class TestParseStoryContent:
    """Tests for parse_story_content."""

    def test_parses_camel_case_fields(self):
        content = parse_story_content(VALID_JSON)

        assert isinstance(content, StoryContent)
        assert content.structure is not None
        assert len(content.structure.chapters) == 3
        assert content.scenes[0].visual_details == "Dark clouds, orange fur"
        assert content.image_prompts == SAMPLE_CONTENT["imagePrompts"]

    def test_round_trips_to_stored_shape(self):
        stored = parse_story_content(VALID_JSON).to_dict()

        assert stored["imagePrompts"] == SAMPLE_CONTENT["imagePrompts"]
        assert stored["scenes"][0]["visualDetails"] == "Dark clouds, orange fur"

    @pytest.mark.parametrize(
        "payload",
        [
            {"scenes": [], "imagePrompts": []},
            {"structure": {"introduction": "x"}, "imagePrompts": []},
            {"structure": {"introduction": "x"}, "scenes": []},
            {"structure": {"introduction": "x"}, "scenes": "none", "imagePrompts": []},
            {"structure": "Once upon a time", "scenes": [], "imagePrompts": ["a fox"]},
            {"structure": ["intro"], "scenes": [], "imagePrompts": ["a fox"]},
            {"structure": 42, "scenes": [], "imagePrompts": ["a fox"]},
            {"structure": {"introduction": "x"}, "scenes": ["bad", {"chapter": 1}], "imagePrompts": []},
            {"structure": {"introduction": "x"}, "scenes": [], "imagePrompts": [None, "a fox"]},
        ],
    )
    def test_missing_required_fields_raise(self, payload):
        with pytest.raises(GenerationError, match="missing required fields"):
            parse_story_content(json.dumps(payload))

    def test_top_level_array_is_rejected(self):
        with pytest.raises(GenerationError):
            parse_story_content("[1, 2, 3]")


class TestBuildStoryPrompt:
    """Tests for build_story_prompt."""

    def test_includes_story_parameters(self):
        prompt = build_story_prompt(
            StoryContext(title="The Brave Fox", age_group="5-8", language="en", description="Courage")
        )

        assert '"The Brave Fox"' in prompt
        assert "Age: 5-8" in prompt
        assert "Language: en" in prompt
        assert '"Courage"' in prompt
        assert '"imagePrompts"' in prompt

    def test_omits_missing_description(self):
        prompt = build_story_prompt(
            StoryContext(title="The Brave Fox", age_group="5-8", language="en")
        )

        assert "Description" not in prompt


class TestContentGenerator:
    """Tests for ContentGenerator.generate."""

    @pytest.mark.asyncio
    async def test_generate_returns_typed_content(self):
        client = make_client(text=f"```json\n{VALID_JSON}\n```")
        generator = ContentGenerator(client=client, model="test-model")

        content = await generator.generate(
            StoryContext(title="The Brave Fox", age_group="5-8", language="en")
        )

        assert isinstance(content, StoryContent)
        assert len(content.image_prompts) == 3

        call = client.aio.models.generate_content.call_args
        assert call.kwargs["model"] == "test-model"
        assert call.kwargs["contents"].endswith(JSON_ONLY_DIRECTIVE)

    @pytest.mark.asyncio
    async def test_generate_makes_exactly_one_call(self):
        client = make_client(error=RuntimeError("503 overloaded"))
        generator = ContentGenerator(client=client, model="test-model")

        with pytest.raises(GenerationError, match="Failed to generate content: 503 overloaded"):
            await generator.generate(
                StoryContext(title="The Brave Fox", age_group="5-8", language="en")
            )

        assert client.aio.models.generate_content.call_count == 1

    @pytest.mark.asyncio
    async def test_generate_rejects_prose_response(self):
        generator = ContentGenerator(client=make_client(text="Once upon a time..."), model="m")

        with pytest.raises(GenerationError, match="No valid JSON"):
            await generator.generate(
                StoryContext(title="The Brave Fox", age_group="5-8", language="en")
            )

    @pytest.mark.asyncio
    async def test_generate_handles_empty_text(self):
        generator = ContentGenerator(client=make_client(text=None), model="m")

        with pytest.raises(GenerationError):
            await generator.generate(
                StoryContext(title="The Brave Fox", age_group="5-8", language="en")
            )
