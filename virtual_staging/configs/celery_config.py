"""
Celery configuration settings.

Manages Celery broker and result backend configuration for the periodic
reaper tasks.

Dependencies: pydantic, pydantic_settings
System role: Background task queue configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from virtual_staging.configs.base import BaseSettings


class CelerySettings(BaseSettings):
    """Celery broker configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CELERY_",
        case_sensitive=False,
        extra="ignore",
    )

    broker_url: str = Field(default="redis://localhost:6379/0", description="Broker URL")
    result_backend_url: str = Field(default="redis://localhost:6379/1", description="Result backend URL")

    task_serializer: str = Field(default="json", description="Task serialization format")
    result_serializer: str = Field(default="json", description="Result serialization format")
    accept_content: list[str] = Field(
        default=["json"],
        description="Accepted content types",
    )
    timezone: str = Field(default="UTC", description="Celery timezone")
