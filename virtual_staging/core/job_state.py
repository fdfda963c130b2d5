"""
Job and generation lifecycle rules.

Closed transition table for jobs, the active and terminal status sets
derived from it, and the coarse progress hint exposed to status polling.

Dependencies: virtual_staging.boundary.db.models
System role: State machine rules shared by services and reapers
"""

from virtual_staging.boundary.db.models.generation_model import GenerationStatus
from virtual_staging.boundary.db.models.job_model import JobStatus

ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}

# Terminal transitions in job_crud only match ACTIVE_STATUSES rows
ACTIVE_STATUSES: tuple[JobStatus, ...] = tuple(s for s, targets in ALLOWED_TRANSITIONS.items() if targets)
TERMINAL_STATUSES: tuple[JobStatus, ...] = tuple(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)

PROGRESS: dict[JobStatus, int] = {
    JobStatus.PENDING: 0,
    JobStatus.PROCESSING: 50,
    JobStatus.COMPLETED: 100,
    JobStatus.FAILED: 0,
}

TIMEOUT_MESSAGE = "Job timed out - marked as failed by cleanup process"


def progress_for(status: JobStatus) -> int:
    """UI progress hint for a job status."""
    return PROGRESS[status]


def generation_status_for(status: JobStatus) -> GenerationStatus:
    """Generation status recorded for a terminal job outcome."""
    match status:
        case JobStatus.COMPLETED:
            return GenerationStatus.COMPLETED
        case JobStatus.FAILED:
            return GenerationStatus.FAILED
        case JobStatus.PROCESSING:
            return GenerationStatus.PROCESSING
        case JobStatus.PENDING:
            return GenerationStatus.PENDING
