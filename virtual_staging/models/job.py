"""
Job status schemas.

Dependencies: pydantic
System role: Job status API contracts
"""

import uuid
from datetime import datetime

from virtual_staging.models.common import CamelModel


class JobStatusResponse(CamelModel):
    """Response schema for job status polling."""

    id: uuid.UUID
    type: str
    status: str
    progress: int
    result_urls: list[str]
    error_message: str | None = None
    credits_used: int
    session_id: uuid.UUID | None = None
    created_at: datetime
    completed_at: datetime | None = None


class ActiveJobsResponse(CamelModel):
    jobs: list[JobStatusResponse]
