"""
Stuck job reaper.

Force-fails jobs left in pending/processing past a staleness threshold,
for example after a crash during the provider fan-out. Never refunds;
RefundReconciler settles credits for the jobs it fails.

Dependencies: sqlalchemy, virtual_staging.boundary.db.CRUD
System role: StuckJobReaper (periodic safety net)
"""

import logging
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.base import utcnow
from virtual_staging.boundary.db.CRUD.job_crud import job_crud
from virtual_staging.core.exceptions import InfrastructureError
from virtual_staging.core.job_state import TIMEOUT_MESSAGE

logger = logging.getLogger(__name__)


class StuckJobReaper:
    """Idempotent sweep over stale non-terminal jobs."""

    def __init__(self, db: AsyncSession, staleness: timedelta = timedelta(minutes=5)) -> None:
        """
        Initialize reaper.

        Args:
            db: AsyncSession for the sweep
            staleness: Age after which an active job counts as stuck
        """
        self.db = db
        self.staleness = staleness

    async def sweep(self, staleness: timedelta | None = None) -> int:
        """
        Fail every active job created before now - staleness.

        Re-running only touches rows that are still active.

        Args:
            staleness: Override for the configured threshold

        Returns:
            int: Number of jobs failed

        Raises:
            InfrastructureError: If the update cannot be committed
        """
        cutoff = utcnow() - (staleness if staleness is not None else self.staleness)
        try:
            job_ids = await job_crud.fail_stale(self.db, cutoff, TIMEOUT_MESSAGE)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:sweep - {type(e).__name__}: {e}")
            raise InfrastructureError("Stuck job sweep failed", operation="sweep_stuck_jobs") from e

        if job_ids:
            logger.warning(
                f"{__name__}:sweep - Failed {len(job_ids)} stuck jobs",
                extra={"job_ids": [str(job_id) for job_id in job_ids], "cutoff": cutoff.isoformat()},
            )
        else:
            logger.info(f"{__name__}:sweep - No stuck jobs")
        return len(job_ids)
