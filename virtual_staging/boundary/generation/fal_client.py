"""
fal.ai generation provider client.

Calls the synchronous fal.run endpoints: the configured image model for
prompt-driven generations and the segmentation model for masks.

Dependencies: httpx, virtual_staging.configs
System role: Generation provider implementation
"""

import logging
from typing import Any

import httpx

from virtual_staging.boundary.generation.provider import GenerationResult
from virtual_staging.configs.generation import GenerationSettings
from virtual_staging.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


class FalGenerationProvider:
    """
    fal.ai image-to-image and segmentation provider.

    The httpx client is injected so callers control connection reuse and
    tests can substitute a MockTransport.
    """

    def __init__(
        self,
        settings: GenerationSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            settings: fal.ai endpoints, credentials and defaults
            client: Shared AsyncClient (a private one is created when omitted)
        """
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout_seconds)
        self._owns_client = client is None
        self._url = self._endpoint_url(settings.endpoint)
        self._mask_url = self._endpoint_url(settings.mask_endpoint)

    def _endpoint_url(self, endpoint: str) -> str:
        return f"{self._settings.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._settings.key:
            headers["Authorization"] = f"Key {self._settings.key}"
        return headers

    async def submit(
        self,
        prompt: str,
        image_url: str,
        options: dict[str, Any] | None = None,
    ) -> GenerationResult:
        """
        Run one generation against fal.ai.

        Args:
            prompt: Instruction for the model
            image_url: Source image URL
            options: Overrides merged over the configured defaults

        Returns:
            GenerationResult with the output image URLs

        Raises:
            ProviderError: Missing credentials, HTTP or transport failure,
                or a malformed response body
        """
        payload = {**self._settings.default_options(), **(options or {})}
        payload["prompt"] = prompt
        payload["image_url"] = image_url

        data, request_id = await self._post(self._url, self._settings.endpoint, payload)
        urls = [image["url"] for image in data.get("images") or [] if isinstance(image, dict) and image.get("url")]

        logger.info(
            f"{__name__}:submit - Provider call finished",
            extra={"provider_job_id": request_id, "images": len(urls)},
        )
        return GenerationResult(result_urls=urls, provider_job_id=request_id)

    async def segment(self, text_prompt: str, image_url: str) -> GenerationResult:
        """
        Generate masks for the objects named in text_prompt.

        The model answers with a single mask_url or a list of masks; either
        may hold plain URLs or image objects.

        Returns:
            GenerationResult with the mask image URLs

        Raises:
            ProviderError: Missing credentials, HTTP or transport failure,
                or a malformed response body
        """
        payload = {
            "image_url": image_url,
            "text_prompt": text_prompt,
            "output_format": "png",
            "return_mask": True,
        }

        data, request_id = await self._post(self._mask_url, self._settings.mask_endpoint, payload)
        candidates = data.get("masks") if data.get("mask_url") is None else [data["mask_url"]]
        urls = [_image_url(item) for item in candidates or []]
        urls = [url for url in urls if url]

        logger.info(
            f"{__name__}:segment - Provider call finished",
            extra={"provider_job_id": request_id, "masks": len(urls)},
        )
        return GenerationResult(result_urls=urls, provider_job_id=request_id)

    async def _post(self, url: str, endpoint: str, payload: dict) -> tuple[dict, str | None]:
        """POST a payload and return the decoded body with the provider request id."""
        if not self._settings.is_configured:
            raise ProviderError("Generation provider is not configured")

        try:
            response = await self._client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            request_id = e.response.headers.get("x-fal-request-id")
            logger.error(
                f"{__name__}:_post - Provider returned {e.response.status_code}",
                extra={"endpoint": endpoint, "provider_job_id": request_id},
            )
            raise ProviderError(
                f"Provider returned HTTP {e.response.status_code}",
                provider_job_id=request_id,
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                f"{__name__}:_post - {type(e).__name__}: {e}",
                extra={"endpoint": endpoint},
            )
            raise ProviderError(f"Provider request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise ProviderError("Provider returned a malformed response") from e

        if not isinstance(data, dict):
            raise ProviderError("Provider returned a malformed response")

        return data, data.get("request_id") or response.headers.get("x-fal-request-id")

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()


def _image_url(item: Any) -> str | None:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item.get("url")
    return None
