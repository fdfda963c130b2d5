"""
Exception hierarchy for the virtual staging backend.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class StagingError(Exception):
    """Base exception for all virtual staging errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(StagingError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        self.field = field
        super().__init__(message, details)


class UnauthorizedError(StagingError):
    """Raised when the caller identity is missing or cannot be trusted."""


class NotFoundError(StagingError):
    """Raised when a row cannot be resolved for the requesting user."""

    def __init__(
        self,
        resource: str,
        resource_id: Any,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details[f"{resource}_id"] = str(resource_id)
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found: {resource_id}", details)


class SessionNotFoundError(NotFoundError):
    """Raised when a session cannot be found."""

    def __init__(self, session_id: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__("session", session_id, details)


class JobNotFoundError(NotFoundError):
    """Raised when a job does not exist or belongs to another user."""

    def __init__(self, job_id: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__("job", job_id, details)


class UserNotFoundError(NotFoundError):
    """Raised when an external identity has no internal user."""

    def __init__(self, external_id: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__("user", external_id, details)


class InsufficientCreditsError(StagingError):
    """Raised when a reservation exceeds the available balance."""

    def __init__(self, required: int, available: int) -> None:
        """
        Initialize insufficient credits error.

        Args:
            required: Credits the operation needs
            available: Credits currently on the account
        """
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient credits. Required: {required}, Available: {available}",
            {"required": required, "available": available},
        )


class ProviderError(StagingError):
    """Raised when the external generation provider fails."""

    def __init__(
        self,
        message: str,
        provider_job_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider_job_id: Provider request id, when one was assigned
            details: Additional context
        """
        details = details or {}
        if provider_job_id:
            details["provider_job_id"] = provider_job_id
        self.provider_job_id = provider_job_id
        super().__init__(message, details)


class InfrastructureError(StagingError):
    """Raised when storage or database operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize infrastructure error.

        Args:
            message: Error message
            operation: Operation that failed (reserve, refund, persist, ...)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
