"""
Error handling for API endpoints.

Maps the domain exception hierarchy to HTTP responses. Validation, auth,
lookup and credit errors carry actionable detail; provider and
infrastructure failures return an opaque message and are logged in full.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from virtual_staging.core.exceptions import (
    InfrastructureError,
    InsufficientCreditsError,
    NotFoundError,
    ProviderError,
    StagingError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

OPERATION_FAILED = "Operation failed. Please try again later."


def to_http_exception(error: Exception) -> HTTPException:
    """
    Translate a domain or database error into an HTTPException.

    Args:
        error: Exception raised by a service

    Returns:
        HTTPException with status code and response detail
    """
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": error.message, "field": error.field},
        )
    if isinstance(error, UnauthorizedError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail={"message": error.message})
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": error.message})
    if isinstance(error, InsufficientCreditsError):
        return HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "message": error.message,
                "required": error.required,
                "available": error.available,
            },
        )
    if isinstance(error, ProviderError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail={"message": OPERATION_FAILED})
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"message": OPERATION_FAILED})


def handle_staging_errors(func: F) -> F:
    """
    Decorator translating service errors into HTTPExceptions.

    Expected domain errors are logged at warning level; provider,
    infrastructure and database errors are logged with their full detail.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except (ValidationError, UnauthorizedError, NotFoundError, InsufficientCreditsError) as e:
            logger.warning(
                f"{func.__name__} - {type(e).__name__}: {e.message}",
                extra={"details": e.details},
            )
            raise to_http_exception(e)

        except (ProviderError, InfrastructureError) as e:
            logger.error(f"{func.__name__} - {type(e).__name__}: {e}", extra={"details": e.details})
            raise to_http_exception(e)

        except SQLAlchemyError as e:
            logger.exception(f"{func.__name__} - Database failure: {type(e).__name__}")
            raise to_http_exception(InfrastructureError(str(e), operation=func.__name__))

        except StagingError as e:
            logger.error(f"{func.__name__} - {type(e).__name__}: {e}")
            raise to_http_exception(e)

    return wrapper  # type: ignore
