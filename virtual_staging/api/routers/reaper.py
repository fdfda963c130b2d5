"""
Administrative sweep endpoints.

Routes: POST /reaper/sweep-stuck-jobs, POST /reaper/retention-cleanup,
POST /reaper/reconcile-refunds

Run the same services as the periodic worker tasks, synchronously.

Dependencies: virtual_staging.application.services, virtual_staging.models
System role: Reaper trigger HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from virtual_staging.api.deps import get_refund_reconciler, get_retention_reaper, get_stuck_job_reaper
from virtual_staging.api.error_handling import handle_staging_errors
from virtual_staging.application.services import RefundReconciler, RetentionReaper, StuckJobReaper
from virtual_staging.models.reaper import (
    ReconcileRefundsResponse,
    RetentionCleanupResponse,
    SweepStuckJobsResponse,
)

router = APIRouter(prefix="/reaper", tags=["reaper"])


@router.post("/sweep-stuck-jobs", response_model=SweepStuckJobsResponse)
@handle_staging_errors
async def sweep_stuck_jobs(
    reaper: StuckJobReaper = Depends(get_stuck_job_reaper),
) -> SweepStuckJobsResponse:
    """Fail jobs stuck in pending/processing past the staleness window."""
    return SweepStuckJobsResponse(jobs_failed=await reaper.sweep())


@router.post("/retention-cleanup", response_model=RetentionCleanupResponse)
@handle_staging_errors
async def retention_cleanup(
    user_id: UUID | None = Query(default=None, alias="userId"),
    reaper: RetentionReaper = Depends(get_retention_reaper),
) -> RetentionCleanupResponse:
    """Delete expired generations, sessions and jobs."""
    summary = await reaper.cleanup(user_id=user_id)
    return RetentionCleanupResponse(**summary)


@router.post("/reconcile-refunds", response_model=ReconcileRefundsResponse)
@handle_staging_errors
async def reconcile_refunds(
    reconciler: RefundReconciler = Depends(get_refund_reconciler),
) -> ReconcileRefundsResponse:
    """Refund failed jobs that were never refunded."""
    return ReconcileRefundsResponse(refunds_issued=await reconciler.reconcile())
