"""
Generation provider contract.

Any image backend the JobManager can fan out to implements
GenerationProvider: submit for prompt-driven image-to-image generation,
segment for text-prompted mask generation.

Dependencies: None
System role: External generation provider interface
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class GenerationResult:
    """
    Outcome of one provider call.

    Attributes:
        result_urls: Output image URLs; empty means the call produced nothing
        provider_job_id: Provider-side request id, when reported
    """

    result_urls: list[str] = field(default_factory=list)
    provider_job_id: str | None = None


class GenerationProvider(Protocol):
    """Image generation backend."""

    async def submit(
        self,
        prompt: str,
        image_url: str,
        options: dict[str, Any] | None = None,
    ) -> GenerationResult:
        """
        Run one generation.

        Raises:
            ProviderError: Network, quota or invalid-input failures
        """
        ...

    async def segment(self, text_prompt: str, image_url: str) -> GenerationResult:
        """
        Produce mask images for the objects described by text_prompt.

        Raises:
            ProviderError: Network, quota or invalid-input failures
        """
        ...
