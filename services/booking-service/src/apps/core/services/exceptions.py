# services/booking-service/src/apps/core/services/exceptions.py
"""
Booking Service Exceptions

Custom exceptions for booking service operations.
"""

import logging
from contextlib import contextmanager
from typing import Optional, Dict, Any

from django.db import OperationalError

logger = logging.getLogger(__name__)


class BookingServiceError(Exception):
    """Base exception for booking service errors."""

    code = "BOOKING_SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        code: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code or self.code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class BookingValidationError(BookingServiceError):
    """Raised when required fields are missing or malformed."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, details=error_details)


class DuplicateReviewError(BookingValidationError):
    """Raised when a customer reviews the same service twice."""

    code = "DUPLICATE_REVIEW"

    def __init__(self, customer_id=None, service_id=None):
        super().__init__(
            message="You have already reviewed this service",
            details={
                "customer_id": str(customer_id),
                "service_id": str(service_id),
            }
        )


class SlotConflictError(BookingServiceError):
    """Raised when the provider slot is already held by an active booking."""

    code = "SLOT_CONFLICT"

    def __init__(
        self,
        provider_id=None,
        scheduled_date=None,
        scheduled_time: str = None,
        message: str = None,
        held_by: str = None
    ):
        msg = message or "Provider is not available at the selected date and time"
        details = {
            "provider_id": str(provider_id) if provider_id else None,
            "scheduled_date": str(scheduled_date) if scheduled_date else None,
            "scheduled_time": scheduled_time,
        }
        if held_by:
            details["held_by"] = held_by
        super().__init__(message=msg, details=details)


class IllegalTransitionError(BookingServiceError):
    """Raised when a booking status transition is not allowed."""

    code = "ILLEGAL_TRANSITION"

    def __init__(
        self,
        current_state: str,
        target_state: str,
        message: str = None
    ):
        msg = message or f"Cannot transition from {current_state} to {target_state}"
        super().__init__(
            message=msg,
            details={
                "current_state": current_state,
                "target_state": target_state,
            }
        )


class NotFoundError(BookingServiceError):
    """Raised when a referenced record does not exist."""

    code = "NOT_FOUND"
    resource = "Resource"

    def __init__(self, resource_id=None, message: str = None):
        msg = message or f"{self.resource} not found: {resource_id}"
        super().__init__(message=msg, details={"id": str(resource_id)})


class BookingNotFoundError(NotFoundError):
    """Raised when a booking is not found."""

    resource = "Booking"


class ReviewNotFoundError(NotFoundError):
    """Raised when a review is not found."""

    resource = "Review"


class TransientStorageError(BookingServiceError):
    """
    Raised when the database is unavailable or a statement timed out.

    The driver message is kept on the exception for logging only; callers
    see a generic message and may retry.
    """

    code = "STORAGE_UNAVAILABLE"

    def __init__(self, operation: str = None, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        super().__init__(
            message="Storage temporarily unavailable, please retry",
            details={"retryable": True}
        )


@contextmanager
def storage_errors(operation: str):
    """Re-raise database outages and statement timeouts as TransientStorageError."""
    try:
        yield
    except OperationalError as exc:
        logger.error(
            f"Storage failure during {operation}: {exc}",
            extra={'operation': operation}
        )
        raise TransientStorageError(operation=operation, cause=exc) from exc
