"""
Object storage configuration for generated illustrations.

Images are written to an S3 bucket and served from its public URL.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

STORAGE_CONSTANTS = {
    "default_folder": "uploads",
    "cache_control": "max-age=31536000",  # 1 year
    "default_extension": "jpg",
    "mime_to_extension": {
        "image/jpeg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
    },
}


def get_storage_settings() -> dict:
    """Read bucket, region and credentials from the environment."""
    return {
        "bucket": os.getenv("AWS_S3_BUCKET", ""),
        "region": os.getenv("AWS_REGION", ""),
        "access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
        "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
    }
