"""FastAPI dependency providers."""

from virtual_staging.api.deps.dependencies import (
    get_credit_ledger,
    get_current_user_id,
    get_generation_provider,
    get_image_store,
    get_job_manager,
    get_refund_reconciler,
    get_retention_reaper,
    get_service_cache,
    get_session_service,
    get_settings_dependency,
    get_stuck_job_reaper,
    get_user_service,
)

__all__ = [
    "get_credit_ledger",
    "get_current_user_id",
    "get_generation_provider",
    "get_image_store",
    "get_job_manager",
    "get_refund_reconciler",
    "get_retention_reaper",
    "get_service_cache",
    "get_session_service",
    "get_settings_dependency",
    "get_stuck_job_reaper",
    "get_user_service",
]
