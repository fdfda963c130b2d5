"""
Test suite for the domain exception hierarchy.
"""

from virtual_staging.core.exceptions import (
    InfrastructureError,
    InsufficientCreditsError,
    JobNotFoundError,
    NotFoundError,
    SessionNotFoundError,
    StagingError,
    ValidationError,
)


class TestExceptions:
    def test_insufficient_credits_carries_amounts(self):
        error = InsufficientCreditsError(required=20, available=15)

        assert isinstance(error, StagingError)
        assert error.required == 20
        assert error.available == 15
        assert "20" in error.message and "15" in error.message

    def test_not_found_subclasses(self):
        assert isinstance(SessionNotFoundError("abc"), NotFoundError)
        assert JobNotFoundError("xyz").resource == "job"
        assert "Session not found: abc" in str(SessionNotFoundError("abc"))

    def test_validation_error_field(self):
        error = ValidationError("Style is required", field="style")

        assert error.field == "style"
        assert error.message == "Style is required"

    def test_str_includes_details(self):
        error = InfrastructureError("Failed to record job outcome", operation="finalize_job")

        assert "finalize_job" in str(error)
