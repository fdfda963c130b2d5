"""
Core domain layer.

Exception hierarchy, job state-machine rules and the generation prompt
catalogue. Pure Python, no I/O.
"""

from virtual_staging.core.exceptions import (
    InfrastructureError,
    InsufficientCreditsError,
    JobNotFoundError,
    NotFoundError,
    ProviderError,
    SessionNotFoundError,
    StagingError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)

__all__ = [
    "StagingError",
    "ValidationError",
    "UnauthorizedError",
    "NotFoundError",
    "SessionNotFoundError",
    "JobNotFoundError",
    "UserNotFoundError",
    "InsufficientCreditsError",
    "ProviderError",
    "InfrastructureError",
]
