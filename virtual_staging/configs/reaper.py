"""
Reaper configuration settings.

Staleness and retention windows for the background sweeps.

Dependencies: pydantic, pydantic_settings
System role: Stuck-job and retention sweep configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from virtual_staging.configs.base import BaseSettings


class ReaperSettings(BaseSettings):
    """Stuck-job, retention and purge windows."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REAPER_",
        case_sensitive=False,
        extra="ignore",
    )

    stuck_job_minutes: int = Field(default=5, ge=1, description="Age after which a non-terminal job is stuck")
    session_retention_days: int = Field(default=30, ge=1, description="Session retention window")
    failed_generation_retention_days: int = Field(
        default=7,
        ge=1,
        description="Retention window for failed generations",
    )
    job_purge_days: int = Field(default=30, ge=1, description="Days until job artifacts are purged")
    sweep_interval_seconds: int = Field(
        default=300,
        ge=30,
        description="Beat interval for the periodic stuck-job sweep",
    )
    cleanup_interval_seconds: int = Field(
        default=86400,
        ge=60,
        description="Beat interval for retention cleanup and refund reconciliation",
    )
