"""
Retention reaper.

Age-based cleanup of generation history, sessions and expired jobs. A
storage concern only: it never touches credit accounts or transactions,
and deleting history never triggers a refund.

Passes:
  1. Failed generations older than the failed-retention window
  2. Sessions older than the session window, with their generations
     (jobs keep their row and lose the session link)
  3. Orphan generations whose session no longer exists
  4. Terminal jobs past purge_at, deleting their images from our bucket

Dependencies: sqlalchemy, virtual_staging.boundary.db.CRUD,
    virtual_staging.boundary.aws
System role: RetentionReaper
"""

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.aws.s3_client import S3ImageStore
from virtual_staging.boundary.db.base import utcnow
from virtual_staging.boundary.db.CRUD.generation_crud import generation_crud
from virtual_staging.boundary.db.CRUD.job_crud import job_crud
from virtual_staging.boundary.db.CRUD.session_crud import session_crud
from virtual_staging.configs.reaper import ReaperSettings
from virtual_staging.core.exceptions import InfrastructureError

logger = logging.getLogger(__name__)


class RetentionReaper:
    """Periodic storage cleanup."""

    def __init__(
        self,
        db: AsyncSession,
        settings: ReaperSettings,
        image_store: S3ImageStore | None = None,
    ) -> None:
        """
        Initialize reaper.

        Args:
            db: AsyncSession for the cleanup
            settings: Retention windows
            image_store: Object store for purging job images (skipped when None)
        """
        self.db = db
        self.settings = settings
        self.image_store = image_store

    async def cleanup(self, user_id: UUID | None = None) -> dict[str, int]:
        """
        Run every retention pass.

        Args:
            user_id: Restrict session and generation passes to one user

        Returns:
            dict: failed_generations_deleted, sessions_deleted,
                session_generations_deleted, orphan_generations_deleted,
                jobs_purged

        Raises:
            InfrastructureError: If the database passes cannot be committed
        """
        now = utcnow()
        failed_cutoff = now - timedelta(days=self.settings.failed_generation_retention_days)
        session_cutoff = now - timedelta(days=self.settings.session_retention_days)

        try:
            scope = None
            if user_id is not None:
                scope = await session_crud.get_ids_created_before(self.db, now, user_id=user_id)

            failed_deleted = await generation_crud.delete_failed_before(self.db, failed_cutoff, session_ids=scope)

            old_sessions = await session_crud.get_ids_created_before(self.db, session_cutoff, user_id=user_id)
            session_generations_deleted = await generation_crud.delete_for_sessions(self.db, old_sessions)
            await job_crud.detach_sessions(self.db, old_sessions)
            sessions_deleted = await session_crud.delete_by_ids(self.db, old_sessions)

            orphans_deleted = await generation_crud.delete_orphans(self.db)

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:cleanup - {type(e).__name__}: {e}")
            raise InfrastructureError("Retention cleanup failed", operation="retention_cleanup") from e

        jobs_purged = await self.purge_expired_jobs(user_id=user_id)

        summary = {
            "failed_generations_deleted": failed_deleted,
            "sessions_deleted": sessions_deleted,
            "session_generations_deleted": session_generations_deleted,
            "orphan_generations_deleted": orphans_deleted,
            "jobs_purged": jobs_purged,
        }
        logger.info(f"{__name__}:cleanup - Retention cleanup finished", extra=summary)
        return summary

    async def purge_expired_jobs(self, user_id: UUID | None = None) -> int:
        """
        Delete terminal jobs past purge_at and their stored images.

        Images are deleted before the row so a failed delete leaves the job
        for the next run. URLs outside our bucket are left alone.

        Returns:
            int: Number of jobs deleted
        """
        try:
            jobs = await job_crud.get_expired(self.db, utcnow(), user_id=user_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:purge_expired_jobs - {type(e).__name__}: {e}")
            raise InfrastructureError("Job purge failed", operation="purge_jobs") from e

        purgeable = []
        for job in jobs:
            urls = list(job.result_urls or [])
            try:
                if self.image_store is not None:
                    for url in urls:
                        key = self.image_store.key_from_url(url)
                        if key is not None:
                            await self.image_store.delete(key)
            except InfrastructureError as e:
                logger.warning(
                    f"{__name__}:purge_expired_jobs - Image delete failed, job kept: {e}",
                    extra={"job_id": str(job.id)},
                )
                continue
            purgeable.append(job.id)

        try:
            purged = await job_crud.delete_by_ids(self.db, purgeable)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:purge_expired_jobs - {type(e).__name__}: {e}")
            raise InfrastructureError("Job purge failed", operation="purge_jobs") from e

        if purged:
            logger.info(f"{__name__}:purge_expired_jobs - Purged {purged} jobs")
        return purged
