# services/booking-service/src/apps/api/views/base.py
"""
Base Views and Mixins

Common functionality for Booking Service API views.
"""

import logging
from uuid import UUID

from apps.core.services import (
    BookingServiceError,
    BookingValidationError,
    IllegalTransitionError,
    NotFoundError,
    SlotConflictError,
    TransientStorageError,
)
from shared.common.exceptions import (
    BadRequestException,
    IllegalTransitionException,
    NotFoundException,
    ServiceUnavailableException,
    SlotConflictException,
)

logger = logging.getLogger(__name__)


# Service error -> API exception, most specific first
SERVICE_ERROR_MAP = (
    (SlotConflictError, SlotConflictException),
    (IllegalTransitionError, IllegalTransitionException),
    (NotFoundError, NotFoundException),
    (BookingValidationError, BadRequestException),
    (TransientStorageError, ServiceUnavailableException),
)


def to_api_exception(exc: BookingServiceError):
    """Translate a service-layer error into the shared API exception."""
    for error_class, api_class in SERVICE_ERROR_MAP:
        if isinstance(exc, error_class):
            error = exc.to_dict()
            return api_class(
                detail=error['message'],
                error_code=error['code'],
                extra_data={'details': error['details']},
            )
    return None


def parse_uuid(value, error_class=NotFoundError) -> UUID:
    """Parse a path identifier; a malformed one is reported like a missing one."""
    try:
        return UUID(str(value))
    except ValueError:
        raise error_class(value)


class ServiceExceptionMixin:
    """
    Mixin mapping booking service exceptions to API error responses.

    Mapped errors flow through the shared exception handler, so every error
    body has the same envelope.
    """

    def handle_exception(self, exc):
        if isinstance(exc, BookingServiceError):
            if isinstance(exc, TransientStorageError):
                logger.warning(
                    f"Transient storage error in {self.__class__.__name__}",
                    extra={'operation': exc.operation}
                )
            api_exc = to_api_exception(exc)
            if api_exc is not None:
                return super().handle_exception(api_exc)

            logger.exception(f"Unmapped service error: {exc.code}")

        return super().handle_exception(exc)
