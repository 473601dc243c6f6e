"""
Text generation configuration for the illustrated story service.

Story content is written by Gemini through the google-genai SDK. The call is
made exactly once per story; there is no retry wrapper here because a failed
content step is recorded on the story and retried by the user.
"""

import os

from dotenv import load_dotenv
from google import genai
from google.genai.types import GenerateContentConfig

# Load environment variables from .env file
load_dotenv()

LLM_CONSTANTS = {
    "model": "gemini-2.5-flash",
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.8,
}


def get_text_client() -> genai.Client:
    """
    Get the Gemini client used for story text generation.

    Uses GOOGLE_API_KEY from environment.
    """
    api_key = os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise ValueError("GOOGLE_API_KEY not found in environment. Set it in .env file.")

    return genai.Client(api_key=api_key)


def get_text_model() -> str:
    """Get the text model ID."""
    return LLM_CONSTANTS["model"]


def get_text_config() -> GenerateContentConfig:
    """Get the fixed sampling config for story text generation."""
    return GenerateContentConfig(
        temperature=LLM_CONSTANTS["temperature"],
        top_k=LLM_CONSTANTS["top_k"],
        top_p=LLM_CONSTANTS["top_p"],
    )
