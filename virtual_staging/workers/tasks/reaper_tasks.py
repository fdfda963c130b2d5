"""
Reaper Celery tasks.

Each task opens its own engine and session (a worker process has no
request-scoped session), runs the service once and disposes the engine.
The run_* coroutines take a session factory so they can run against any
database.

Dependencies: celery, sqlalchemy, virtual_staging.application, virtual_staging.boundary
System role: Periodic reaper execution
"""

import asyncio
import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from virtual_staging.application.services import RefundReconciler, RetentionReaper, StuckJobReaper
from virtual_staging.boundary.aws.s3_client import S3ImageStore
from virtual_staging.boundary.db.connection import create_session_factory, get_async_engine
from virtual_staging.configs import Settings, get_settings
from virtual_staging.workers import celery_app

logger = logging.getLogger(__name__)


async def run_sweep(session_factory: async_sessionmaker[AsyncSession], settings: Settings) -> int:
    """Run one stuck-job sweep."""
    async with session_factory() as db:
        reaper = StuckJobReaper(db, staleness=timedelta(minutes=settings.reaper.stuck_job_minutes))
        return await reaper.sweep()


async def run_reconcile(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Run one refund reconciliation pass."""
    async with session_factory() as db:
        return await RefundReconciler(db).reconcile()


async def run_retention(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    image_store: S3ImageStore | None = None,
) -> dict[str, int]:
    """Run one retention cleanup."""
    async with session_factory() as db:
        return await RetentionReaper(db, settings.reaper, image_store=image_store).cleanup()


async def _with_engine(runner, *args):
    engine = get_async_engine()
    try:
        return await runner(create_session_factory(engine), *args)
    finally:
        await engine.dispose()


@celery_app.task(name="virtual_staging.workers.tasks.reaper_tasks.sweep_stuck_jobs")
def sweep_stuck_jobs() -> int:
    """Fail stale pending/processing jobs."""
    failed = asyncio.run(_with_engine(run_sweep, get_settings()))
    logger.info(f"{__name__}:sweep_stuck_jobs - Swept", extra={"jobs_failed": failed})
    return failed


@celery_app.task(name="virtual_staging.workers.tasks.reaper_tasks.reconcile_refunds")
def reconcile_refunds() -> int:
    """Refund failed jobs with no refund entry."""
    refunded = asyncio.run(_with_engine(run_reconcile))
    logger.info(f"{__name__}:reconcile_refunds - Reconciled", extra={"refunds_issued": refunded})
    return refunded


@celery_app.task(name="virtual_staging.workers.tasks.reaper_tasks.retention_cleanup")
def retention_cleanup() -> dict:
    """Delete expired history and purge expired jobs."""
    settings = get_settings()
    image_store = S3ImageStore(
        bucket=settings.s3_images.bucket,
        base_url=settings.s3_images.base_url,
        region=settings.s3_images.region,
    )
    summary = asyncio.run(_with_engine(run_retention, settings, image_store))
    logger.info(f"{__name__}:retention_cleanup - Cleaned", extra=summary)
    return summary
