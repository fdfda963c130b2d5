"""
S3 image storage configuration settings.

Bucket holding uploaded originals and copies of generated images.

Dependencies: pydantic_settings
System role: Object store configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from virtual_staging.configs.base import BaseSettings


class S3ImagesSettings(BaseSettings):
    """S3 bucket for room images."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="S3_IMAGES_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(default="virtual-staging-images", description="S3 bucket name")
    region: str = Field(default="us-east-1", description="AWS region")
    public_base_url: str | None = Field(
        default=None,
        description="Public URL prefix for objects (defaults to the virtual-hosted S3 URL)",
    )

    @property
    def base_url(self) -> str:
        """Public URL prefix under which bucket objects are served."""
        if self.public_base_url:
            return self.public_base_url.rstrip("/")
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"
