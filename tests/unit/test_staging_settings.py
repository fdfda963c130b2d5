"""
Test suite for configuration loading from the environment.
"""

from virtual_staging.configs.billing import BillingSettings
from virtual_staging.configs.generation import GenerationSettings
from virtual_staging.configs.reaper import ReaperSettings
from virtual_staging.configs.s3_images import S3ImagesSettings
from virtual_staging.configs.settings import Settings


class TestBillingSettings:
    def test_defaults(self):
        settings = BillingSettings()

        assert settings.empty_room_cost == 10
        assert settings.staging_cost == 20
        assert settings.max_empty_room_attempts == 3
        assert settings.mask_cost == 10

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CREDITS_STAGING_COST", "35")

        assert BillingSettings().staging_cost == 35


class TestGenerationSettings:
    def test_short_key_is_not_configured(self):
        assert not GenerationSettings(key="short").is_configured
        assert not GenerationSettings(key=None).is_configured
        assert GenerationSettings(key="0123456789abcdef").is_configured

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("FAL_STAGING_VARIANT_COUNT", "3")

        assert GenerationSettings().staging_variant_count == 3

    def test_mask_endpoint_default(self):
        assert GenerationSettings().mask_endpoint == "fal-ai/lang-segment-anything"


class TestReaperSettings:
    def test_defaults(self):
        settings = ReaperSettings()

        assert settings.stuck_job_minutes == 5
        assert settings.session_retention_days == 30
        assert settings.failed_generation_retention_days == 7


class TestS3ImagesSettings:
    def test_base_url_defaults_to_bucket_host(self):
        settings = S3ImagesSettings(bucket="rooms", region="eu-west-1")

        assert settings.base_url == "https://rooms.s3.eu-west-1.amazonaws.com"

    def test_public_base_url_wins(self):
        settings = S3ImagesSettings(public_base_url="https://cdn.example.com/")

        assert settings.base_url == "https://cdn.example.com"


class TestSettings:
    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert Settings().log_level == "DEBUG"
