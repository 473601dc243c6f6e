"""Generation clients: story text, images and object storage."""

from .content_generator import ContentGenerator, clean_json_response, get_content_generator
from .image_generator import ImageGenerator, get_image_generator
from .object_store import ObjectStore, extension_for, get_object_store

__all__ = [
    "ContentGenerator",
    "clean_json_response",
    "get_content_generator",
    "ImageGenerator",
    "get_image_generator",
    "ObjectStore",
    "extension_for",
    "get_object_store",
]
