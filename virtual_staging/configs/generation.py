"""
Generation provider configuration settings.

Credentials, endpoint and default parameters for the fal.ai image model
used for empty-room and staging generations, plus the segmentation model
used for furniture masks.

Dependencies: pydantic, pydantic_settings
System role: External generation provider configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from virtual_staging.configs.base import BaseSettings


class GenerationSettings(BaseSettings):
    """fal.ai generation provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FAL_",
        case_sensitive=False,
        extra="ignore",
    )

    key: str | None = Field(default=None, description="fal.ai API key")
    base_url: str = Field(default="https://fal.run", description="fal.ai synchronous API base URL")
    endpoint: str = Field(
        default="fal-ai/flux-pro/kontext",
        description="Model endpoint used for image-to-image generation",
    )
    mask_endpoint: str = Field(
        default="fal-ai/lang-segment-anything",
        description="Segmentation model endpoint used for mask generation",
    )
    request_timeout_seconds: float = Field(
        default=180.0,
        description="Deadline for a single provider call in seconds",
    )
    staging_variant_count: int = Field(
        default=2,
        ge=1,
        le=4,
        description="Number of parallel variants produced per staging request",
    )

    guidance_scale: float = Field(default=3.5, description="Prompt guidance scale")
    num_images: int = Field(default=1, description="Images requested per call")
    safety_tolerance: str = Field(default="2", description="Provider safety tolerance level")
    output_format: str = Field(default="jpeg", description="Output image format")
    aspect_ratio: str = Field(default="16:9", description="Output aspect ratio")

    @property
    def is_configured(self) -> bool:
        """Whether an API key that looks usable is present."""
        return bool(self.key) and len(self.key) >= 10

    def default_options(self) -> dict:
        """Default request parameters sent with every generation call."""
        return {
            "guidance_scale": self.guidance_scale,
            "num_images": self.num_images,
            "safety_tolerance": self.safety_tolerance,
            "output_format": self.output_format,
            "aspect_ratio": self.aspect_ratio,
        }
