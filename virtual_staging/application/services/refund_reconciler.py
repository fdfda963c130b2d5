"""
Refund reconciler.

Settles credits for failed jobs that consumed credits but have no refund
entry: crashes between marking a job failed and refunding it, and jobs
failed by the stuck-job sweep. Each job is refunded and committed on its
own, so one bad row does not block the rest and reruns are no-ops.

Dependencies: sqlalchemy, virtual_staging.application.services.credit_ledger
System role: Failed-job refund reconciliation
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.boundary.db.CRUD.job_crud import job_crud
from virtual_staging.core.exceptions import InfrastructureError

logger = logging.getLogger(__name__)


class RefundReconciler:
    """Refund failed, unrefunded jobs exactly once."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.ledger = CreditLedger(db)

    async def reconcile(self, limit: int | None = None) -> int:
        """
        Issue missing refunds.

        Args:
            limit: Maximum number of jobs handled in this pass

        Returns:
            int: Number of refunds issued

        Raises:
            InfrastructureError: If pending jobs cannot be listed
        """
        try:
            jobs = await job_crud.get_failed_without_refund(self.db, limit=limit)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:reconcile - {type(e).__name__}: {e}")
            raise InfrastructureError("Refund reconciliation failed", operation="reconcile_refunds") from e

        pending = [(job.id, job.user_id, job.credits_used, job.type.value) for job in jobs]
        refunded = 0
        for job_id, user_id, credits_used, job_type in pending:
            try:
                await self.ledger.refund(
                    user_id,
                    credits_used,
                    f"Refund: {job_type.replace('_', ' ')} generation failed",
                    job_id=job_id,
                )
                await self.db.commit()
                refunded += 1
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(
                    f"{__name__}:reconcile - Refund failed: {type(e).__name__}: {e}",
                    extra={"job_id": str(job_id), "user_id": str(user_id)},
                )

        logger.info(
            f"{__name__}:reconcile - Reconciliation finished",
            extra={"candidates": len(pending), "refunded": refunded},
        )
        return refunded
