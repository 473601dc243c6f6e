"""Pytest fixtures for unit tests."""

import os
from unittest.mock import AsyncMock

import pytest

# Unit tests never reach real services; keep startup from touching them
os.environ["SKIP_ENV_VALIDATION"] = "1"
os.environ["DATABASE_URL"] = ""
os.environ["REDIS_URL"] = ""
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests")

from fastapi.testclient import TestClient  # noqa: E402

from storyforge.api.auth.tokens import create_access_token  # noqa: E402
from storyforge.api.database.repository import StoryRepository  # noqa: E402
from storyforge.api.dependencies import (  # noqa: E402
    get_asset_pipeline,
    get_images,
    get_repository,
    get_story_service,
)
from storyforge.api.main import app  # noqa: E402
from storyforge.api.services.asset_pipeline import AssetPipeline  # noqa: E402
from storyforge.api.services.story_service import StoryService  # noqa: E402
from storyforge.core.modules.image_generator import ImageGenerator  # noqa: E402
from .factories import TEST_USER  # noqa: E402


@pytest.fixture
def auth_headers():
    """Authorization header for TEST_USER."""
    return {"Authorization": f"Bearer {create_access_token(TEST_USER)}"}


@pytest.fixture
def mock_repository():
    """Create a mock repository for unit tests."""
    return AsyncMock(spec=StoryRepository)


@pytest.fixture
def mock_service():
    """Create a mock service for unit tests."""
    return AsyncMock(spec=StoryService)


@pytest.fixture
def mock_pipeline():
    """Create a mock pipeline for unit tests."""
    return AsyncMock(spec=AssetPipeline)


@pytest.fixture
def mock_images():
    """Create a mock image generator for unit tests."""
    return AsyncMock(spec=ImageGenerator)


@pytest.fixture
def client_with_mocks(mock_repository, mock_service, mock_pipeline, mock_images):
    """TestClient with mocked dependencies."""
    app.dependency_overrides[get_repository] = lambda: mock_repository
    app.dependency_overrides[get_story_service] = lambda: mock_service
    app.dependency_overrides[get_asset_pipeline] = lambda: mock_pipeline
    app.dependency_overrides[get_images] = lambda: mock_images

    with TestClient(app) as client:
        yield client, mock_repository, mock_service

    app.dependency_overrides.clear()
