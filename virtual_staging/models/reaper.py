"""
Administrative sweep schemas.

Dependencies: pydantic
System role: Reaper trigger API contracts
"""

from virtual_staging.models.common import CamelModel


class SweepStuckJobsResponse(CamelModel):
    jobs_failed: int


class RetentionCleanupResponse(CamelModel):
    """Row counts removed by each retention pass."""

    failed_generations_deleted: int
    sessions_deleted: int
    session_generations_deleted: int
    orphan_generations_deleted: int
    jobs_purged: int


class ReconcileRefundsResponse(CamelModel):
    refunds_issued: int
