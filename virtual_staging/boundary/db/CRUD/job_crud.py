"""
Job CRUD operations.

Provides owner-scoped reads, terminal transitions guarded by the current
status, and the bulk queries used by the reapers.

Dependencies: sqlalchemy, virtual_staging.boundary.db.models
System role: Job persistence operations for generation tracking
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import and_, delete, not_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.base import utcnow
from virtual_staging.boundary.db.CRUD.base_crud import BaseCRUD
from virtual_staging.boundary.db.CRUD.credit_crud import credit_transaction_crud
from virtual_staging.boundary.db.models.job_model import JobModel, JobStatus
from virtual_staging.core import job_state


class JobCRUD(BaseCRUD[JobModel]):
    """
    CRUD operations for JobModel.

    Terminal transitions only match rows still in an active status, so a
    job reaches completed or failed exactly once even when a reaper races
    the orchestrator.
    """

    def __init__(self) -> None:
        super().__init__(JobModel)

    async def get_for_user(
        self,
        session: AsyncSession,
        id: UUID,
        user_id: UUID,
    ) -> JobModel | None:
        """Retrieve a job only if it belongs to the user."""
        stmt = select(JobModel).where(JobModel.id == id, JobModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_for_user(
        self,
        session: AsyncSession,
        user_id: UUID,
    ) -> Sequence[JobModel]:
        """Pending and processing jobs of a user, newest first."""
        stmt = (
            select(JobModel)
            .where(JobModel.user_id == user_id, JobModel.status.in_(job_state.ACTIVE_STATUSES))
            .order_by(JobModel.created_at.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def mark_completed(
        self,
        session: AsyncSession,
        id: UUID,
        result_urls: list[str],
        provider_job_ids: str | None,
    ) -> JobModel | None:
        """
        Move an active job to COMPLETED.

        Args:
            session: Async database session
            id: Job UUID
            result_urls: One URL per variant in call order
            provider_job_ids: Comma-joined provider request ids

        Returns:
            Updated JobModel, None when the job is no longer active
        """
        stmt = (
            update(JobModel)
            .where(JobModel.id == id, JobModel.status.in_(job_state.ACTIVE_STATUSES))
            .values(
                status=JobStatus.COMPLETED,
                result_urls=result_urls,
                provider_job_ids=provider_job_ids,
                completed_at=utcnow(),
            )
            .returning(JobModel)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
        provider_job_ids: str | None = None,
    ) -> JobModel | None:
        """
        Move an active job to FAILED.

        Returns:
            Updated JobModel, None when the job is no longer active
        """
        stmt = (
            update(JobModel)
            .where(JobModel.id == id, JobModel.status.in_(job_state.ACTIVE_STATUSES))
            .values(
                status=JobStatus.FAILED,
                error_message=error_message,
                provider_job_ids=provider_job_ids,
                completed_at=utcnow(),
            )
            .returning(JobModel)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def fail_stale(
        self,
        session: AsyncSession,
        cutoff: datetime,
        error_message: str,
    ) -> Sequence[UUID]:
        """
        Fail every active job created before the cutoff.

        Args:
            session: Async database session
            cutoff: Creation time threshold
            error_message: Message stored on the failed jobs

        Returns:
            Ids of the jobs that were failed
        """
        stmt = (
            update(JobModel)
            .where(JobModel.status.in_(job_state.ACTIVE_STATUSES), JobModel.created_at < cutoff)
            .values(status=JobStatus.FAILED, error_message=error_message, completed_at=utcnow())
            .returning(JobModel.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_failed_without_refund(
        self,
        session: AsyncSession,
        limit: int | None = None,
    ) -> Sequence[JobModel]:
        """
        Failed jobs that consumed credits and have no refund entry.

        Returns:
            JobModels awaiting reconciliation, oldest first
        """
        stmt = (
            select(JobModel)
            .where(
                JobModel.status == JobStatus.FAILED,
                JobModel.credits_used > 0,
                ~credit_transaction_crud.refund_exists_clause(JobModel.id),
            )
            .order_by(JobModel.created_at)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_expired(
        self,
        session: AsyncSession,
        now: datetime,
        user_id: UUID | None = None,
    ) -> Sequence[JobModel]:
        """
        Terminal jobs whose purge_at has passed.

        Failed jobs that consumed credits are held back until their refund
        exists, so reconciliation can still find them.
        """
        awaiting_refund = and_(
            JobModel.status == JobStatus.FAILED,
            JobModel.credits_used > 0,
            not_(credit_transaction_crud.refund_exists_clause(JobModel.id)),
        )
        stmt = select(JobModel).where(
            JobModel.status.in_(job_state.TERMINAL_STATUSES),
            JobModel.purge_at.is_not(None),
            JobModel.purge_at < now,
            not_(awaiting_refund),
        )
        if user_id is not None:
            stmt = stmt.where(JobModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def detach_sessions(self, session: AsyncSession, session_ids: Sequence[UUID]) -> None:
        """Clear session_id on jobs that reference the given sessions."""
        if not session_ids:
            return
        await session.execute(
            update(JobModel).where(JobModel.session_id.in_(session_ids)).values(session_id=None)
        )

    async def delete_by_ids(self, session: AsyncSession, ids: Sequence[UUID]) -> int:
        """Delete jobs by id, returning the number removed."""
        if not ids:
            return 0
        result = await session.execute(delete(JobModel).where(JobModel.id.in_(ids)))
        return result.rowcount

job_crud = JobCRUD()
