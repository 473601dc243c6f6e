"""
Module for generating story text with Gemini.

One prompt, one model call. The response is expected to be a single JSON
object; models sometimes wrap it in prose or typographic quotes, so the raw
text goes through `clean_json_response` before it is parsed and validated.
"""

import json
import logging
import re
from typing import Optional

from google import genai

from storyforge.config import get_text_client, get_text_config, get_text_model
from ..errors import GenerationError
from ..types import StoryContent, StoryContext

logger = logging.getLogger(__name__)

JSON_ONLY_DIRECTIVE = (
    "\n\nIMPORTANT: Respond ONLY with the JSON object. "
    "Do not add any additional text, explanations, or formatting."
)

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_BLANK_LINES_RE = re.compile(r"\n\s*\n")


def clean_json_response(response: str) -> str:
    """
    Return the JSON text contained in a model response.

    Tries, in order: the response verbatim, the first `{...}` span, and that
    span with smart quotes straightened and blank lines collapsed. Valid JSON
    input is returned unchanged.

    Raises:
        GenerationError: If none of the three candidates parses
    """
    try:
        json.loads(response)
        return response
    except (TypeError, ValueError):
        pass

    match = _JSON_OBJECT_RE.search(response or "")
    if match:
        candidate = match.group(0)
        try:
            json.loads(candidate)
            return candidate
        except ValueError:
            pass

        cleaned = (
            candidate.replace("“", '"')
            .replace("”", '"')
            .replace("‘", "'")
            .replace("’", "'")
        )
        cleaned = _BLANK_LINES_RE.sub("\n", cleaned).strip()
        try:
            json.loads(cleaned)
            return cleaned
        except ValueError:
            pass

    raise GenerationError("No valid JSON found in response")


def build_story_prompt(context: StoryContext) -> str:
    """Build the story instruction for the given context."""
    description_line = f'- Description: "{context.description}"\n' if context.description else ""
    return f"""You are a JSON-only story generation API. Generate a children's story with these parameters:
- Age: {context.age_group}
- Title: "{context.title}"
{description_line}- Language: {context.language}

Return ONLY a JSON object with this structure (no other text):
{{
  "structure": {{
    "introduction": "string",
    "chapters": [
      {{
        "title": "string",
        "content": "string",
        "mood": "string"
      }}
    ],
    "conclusion": "string"
  }},
  "scenes": [
    {{
      "chapter": number,
      "setting": "string",
      "characters": ["string"],
      "action": "string",
      "mood": "string",
      "visualDetails": "string"
    }}
  ],
  "imagePrompts": ["string"]
}}"""


def parse_story_content(text: str) -> StoryContent:
    """Clean, parse and structurally validate a model response.

    Raises:
        GenerationError: If no JSON can be recovered or required fields are missing
    """
    parsed = json.loads(clean_json_response(text))

    if (
        not isinstance(parsed, dict)
        or not isinstance(parsed.get("structure"), dict)
        or not parsed["structure"]
        or not isinstance(parsed.get("scenes"), list)
        or not isinstance(parsed.get("imagePrompts"), list)
    ):
        raise GenerationError("Generated content missing required fields")

    # Scene i pairs with prompt i, so malformed entries cannot be skipped
    if not all(isinstance(s, dict) for s in parsed["scenes"]) or not all(
        isinstance(p, str) for p in parsed["imagePrompts"]
    ):
        raise GenerationError("Generated content missing required fields")

    return StoryContent.from_dict(parsed)


class ContentGenerator:
    """
    Generate story structure, scenes and image prompts with Gemini.

    The model is called once per `generate`; failures are not retried here.
    """

    def __init__(self, client: Optional[genai.Client] = None, model: Optional[str] = None):
        self.client = client or get_text_client()
        self.model = model or get_text_model()
        self.config = get_text_config()

    async def generate(self, context: StoryContext) -> StoryContent:
        """
        Generate content for a story.

        Args:
            context: Title, age group, language and optional description

        Returns:
            StoryContent with a non-null structure

        Raises:
            GenerationError: Upstream failure, unparseable output or missing fields
        """
        prompt = build_story_prompt(context) + JSON_ONLY_DIRECTIVE

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self.config,
            )
        except Exception as e:
            logger.error(f"Text generation call failed: {e}")
            raise GenerationError(f"Failed to generate content: {e}") from e

        text = response.text or ""
        content = parse_story_content(text)
        logger.info(
            f"Generated content with {len(content.scenes)} scenes "
            f"and {len(content.image_prompts)} image prompts"
        )
        return content


# Process-wide instance, created on first use
_content_generator: Optional[ContentGenerator] = None


def get_content_generator() -> ContentGenerator:
    """Get the shared ContentGenerator."""
    global _content_generator
    if _content_generator is None:
        _content_generator = ContentGenerator()
    return _content_generator
