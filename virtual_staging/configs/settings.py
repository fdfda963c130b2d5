"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from virtual_staging.configs.base import BaseSettings
from virtual_staging.configs.billing import BillingSettings
from virtual_staging.configs.celery_config import CelerySettings
from virtual_staging.configs.database import DatabaseSettings
from virtual_staging.configs.generation import GenerationSettings
from virtual_staging.configs.reaper import ReaperSettings
from virtual_staging.configs.s3_images import S3ImagesSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = DatabaseSettings()
    generation: GenerationSettings = GenerationSettings()
    billing: BillingSettings = BillingSettings()
    reaper: ReaperSettings = ReaperSettings()
    s3_images: S3ImagesSettings = S3ImagesSettings()
    celery: CelerySettings = CelerySettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from virtual_staging.configs import get_settings
        settings = get_settings()
    """
    return Settings()
