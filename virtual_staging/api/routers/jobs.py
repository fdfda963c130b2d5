"""
Job API endpoints.

Routes: GET /jobs/active, GET /jobs/{id}

Dependencies: virtual_staging.application.services.job_manager, virtual_staging.models
System role: Job status HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from virtual_staging.api.deps import get_current_user_id, get_job_manager
from virtual_staging.api.error_handling import handle_staging_errors
from virtual_staging.application.services.job_manager import JobManager
from virtual_staging.models.job import ActiveJobsResponse, JobStatusResponse

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/active", response_model=ActiveJobsResponse)
@handle_staging_errors
async def list_active_jobs(
    user_id: UUID = Depends(get_current_user_id),
    job_manager: JobManager = Depends(get_job_manager),
) -> ActiveJobsResponse:
    """The caller's pending and processing jobs."""
    jobs = await job_manager.list_active_jobs(user_id)
    return ActiveJobsResponse(jobs=[JobStatusResponse(**job) for job in jobs])


@router.get("/{job_id}", response_model=JobStatusResponse)
@handle_staging_errors
async def get_job_status(
    job_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    job_manager: JobManager = Depends(get_job_manager),
) -> JobStatusResponse:
    """
    Get job status for polling.

    progress is a coarse hint: pending 0, processing 50, completed 100,
    failed 0.

    Raises:
        HTTPException(404): Job not found or owned by another user

    Example Response:
        {
            "id": "123e4567-e89b-12d3-a456-426614174000",
            "type": "staging",
            "status": "completed",
            "progress": 100,
            "resultUrls": ["https://.../v1.jpeg", "https://.../v2.jpeg"],
            "errorMessage": null,
            "creditsUsed": 20,
            "sessionId": null,
            "createdAt": "2026-01-01T12:00:00Z",
            "completedAt": "2026-01-01T12:00:41Z"
        }
    """
    job = await job_manager.get_status(job_id, user_id)
    return JobStatusResponse(**job)
