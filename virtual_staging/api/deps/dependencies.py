"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived clients (HTTP
client for the generation provider, S3 store) live in a ServiceCache
created once per process; services are built per request around the
request's database session.

Dependencies: virtual_staging.configs, virtual_staging.application, virtual_staging.boundary
System role: DI container for service injection
"""

from datetime import timedelta
from uuid import UUID

import httpx
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.api.error_handling import to_http_exception
from virtual_staging.application.services import (
    CreditLedger,
    JobManager,
    RefundReconciler,
    RetentionReaper,
    SessionService,
    StuckJobReaper,
    UserService,
)
from virtual_staging.boundary.aws.s3_client import S3ImageStore
from virtual_staging.boundary.db import get_async_db
from virtual_staging.boundary.generation import FalGenerationProvider, GenerationProvider
from virtual_staging.configs import Settings, get_settings
from virtual_staging.core.exceptions import NotFoundError, UnauthorizedError


class ServiceCache:
    """Container for cached client instances."""

    def __init__(self) -> None:
        self._http_client: httpx.AsyncClient | None = None
        self._provider: FalGenerationProvider | None = None
        self._image_store: S3ImageStore | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Shared HTTP client for provider calls."""
        if self._http_client is None:
            settings = get_settings()
            self._http_client = httpx.AsyncClient(timeout=settings.generation.request_timeout_seconds)
        return self._http_client

    @property
    def provider(self) -> FalGenerationProvider:
        """Get cached generation provider."""
        if self._provider is None:
            self._provider = FalGenerationProvider(get_settings().generation, client=self.http_client)
        return self._provider

    @property
    def image_store(self) -> S3ImageStore:
        """Get cached S3 image store."""
        if self._image_store is None:
            s3_settings = get_settings().s3_images
            self._image_store = S3ImageStore(
                bucket=s3_settings.bucket,
                base_url=s3_settings.base_url,
                region=s3_settings.region,
            )
        return self._image_store

    async def aclose(self) -> None:
        """Close network clients and drop cached instances."""
        if self._http_client is not None:
            await self._http_client.aclose()
        self._http_client = None
        self._provider = None
        self._image_store = None


_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_settings_dependency() -> Settings:
    return get_settings()


def get_generation_provider() -> GenerationProvider:
    return get_service_cache().provider


def get_image_store() -> S3ImageStore:
    return get_service_cache().image_store


def get_user_service(db: AsyncSession = Depends(get_async_db)) -> UserService:
    return UserService(db)


async def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    user_service: UserService = Depends(get_user_service),
) -> UUID:
    """
    Resolve the caller from the identity header set by the auth layer.

    Raises:
        HTTPException(401): Missing identity
        HTTPException(404): Identity not registered
    """
    try:
        return await user_service.resolve(x_user_id)
    except (UnauthorizedError, NotFoundError) as e:
        raise to_http_exception(e)


def get_session_service(db: AsyncSession = Depends(get_async_db)) -> SessionService:
    """
    Get session service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        SessionService: Service bound to the request session
    """
    return SessionService(db)


def get_credit_ledger(db: AsyncSession = Depends(get_async_db)) -> CreditLedger:
    return CreditLedger(db)


def get_job_manager(
    db: AsyncSession = Depends(get_async_db),
    provider: GenerationProvider = Depends(get_generation_provider),
    settings: Settings = Depends(get_settings_dependency),
) -> JobManager:
    """
    Get job manager instance.

    Args:
        db: Async database session
        provider: Cached generation provider
        settings: Application settings

    Returns:
        JobManager: Orchestrator bound to the request session
    """
    return JobManager(db, provider, settings)


def get_stuck_job_reaper(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> StuckJobReaper:
    return StuckJobReaper(db, staleness=timedelta(minutes=settings.reaper.stuck_job_minutes))


def get_retention_reaper(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
    image_store: S3ImageStore = Depends(get_image_store),
) -> RetentionReaper:
    return RetentionReaper(db, settings.reaper, image_store=image_store)


def get_refund_reconciler(db: AsyncSession = Depends(get_async_db)) -> RefundReconciler:
    return RefundReconciler(db)
