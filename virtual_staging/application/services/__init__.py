"""Service orchestrators."""

from .credit_ledger import CreditLedger
from .generation_tracker import GenerationTracker
from .job_manager import GenerationRequest, JobManager
from .refund_reconciler import RefundReconciler
from .retention_reaper import RetentionReaper
from .session_service import SessionService
from .stuck_job_reaper import StuckJobReaper
from .user_service import UserService

__all__ = [
    "CreditLedger",
    "GenerationRequest",
    "GenerationTracker",
    "JobManager",
    "RefundReconciler",
    "RetentionReaper",
    "SessionService",
    "StuckJobReaper",
    "UserService",
]
