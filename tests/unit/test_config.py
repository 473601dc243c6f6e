"""Tests for environment validation and model configuration."""

import pytest

from storyforge.api.config import REQUIRED_ENV_VARS, get_asyncpg_dsn, validate_environment
from storyforge.api import config as api_config
from storyforge.config import (
    get_image_client,
    get_image_config,
    get_storage_settings,
    get_text_client,
    get_text_config,
)
from storyforge.core.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("SKIP_ENV_VALIDATION", raising=False)
    for name in REQUIRED_ENV_VARS + ("GOOGLE_IMAGE_API_KEY",):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestValidateEnvironment:
    def test_lists_every_missing_variable(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql+asyncpg://localhost/stories")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_environment()

        message = str(exc_info.value)
        assert "DATABASE_URL" not in message
        for name in REQUIRED_ENV_VARS[1:]:
            assert name in message

    def test_passes_when_all_set(self, clean_env):
        for name in REQUIRED_ENV_VARS:
            clean_env.setenv(name, "value")

        validate_environment()

    def test_skip_flag_disables_check(self, clean_env):
        clean_env.setenv("SKIP_ENV_VALIDATION", "1")

        validate_environment()


def test_asyncpg_dsn_strips_driver(monkeypatch):
    monkeypatch.setattr(api_config, "DATABASE_URL", "postgresql+asyncpg://u:p@db/stories")

    assert get_asyncpg_dsn() == "postgresql://u:p@db/stories"


class TestModelConfig:
    def test_text_client_requires_key(self, clean_env):
        with pytest.raises(ValueError, match="GOOGLE_API_KEY"):
            get_text_client()

    def test_image_client_requires_a_key(self, clean_env):
        with pytest.raises(ValueError):
            get_image_client()

    def test_text_sampling_config(self):
        config = get_text_config()

        assert config.temperature == 0.7
        assert config.top_k == 40
        assert config.top_p == 0.8

    def test_image_config_requests_images(self):
        config = get_image_config()

        assert config.response_modalities == ["IMAGE"]

    def test_storage_settings_from_env(self, clean_env):
        clean_env.setenv("AWS_S3_BUCKET", "story-bucket")
        clean_env.setenv("AWS_REGION", "eu-west-1")

        settings = get_storage_settings()

        assert settings["bucket"] == "story-bucket"
        assert settings["region"] == "eu-west-1"
