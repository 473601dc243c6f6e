"""
Story generation constants for the illustrated story service.

Values shared by the API layer, the pipeline and the worker.
"""

# Story generation constants
STORY_CONSTANTS = {
    "age_groups": ("3-5", "5-8", "8-12"),
    "languages": ("en", "es", "fr"),
    "title_min_length": 3,
    "title_max_length": 100,
    "description_max_length": 500,
    "image_prompt_max_length": 1000,
    "image_chunk_size": 2,  # Max image requests in flight per story
    "image_folder": "story-images",
    "asset_type": "image",
    # Minutes a story may sit in a processing state before the sweeper fails it
    "stale_content_minutes": 5,
    "stale_assets_minutes": 15,
}
