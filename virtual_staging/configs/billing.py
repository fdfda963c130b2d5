"""
Billing configuration settings.

Credit costs per operation and the empty-room attempt policy.

Dependencies: pydantic, pydantic_settings
System role: Credit pricing configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from virtual_staging.configs.base import BaseSettings


class BillingSettings(BaseSettings):
    """Credit cost configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CREDITS_",
        case_sensitive=False,
        extra="ignore",
    )

    empty_room_cost: int = Field(default=10, ge=0, description="Credits per empty-room generation")
    staging_cost: int = Field(default=20, ge=0, description="Credits per staging request (all variants)")
    mask_cost: int = Field(default=10, ge=0, description="Credits per mask generation")
    max_empty_room_attempts: int = Field(
        default=3,
        ge=1,
        description="Maximum empty-room attempts per session",
    )
    free_empty_room_retries: bool = Field(
        default=True,
        description="Charge only the first empty-room attempt of a session",
    )
