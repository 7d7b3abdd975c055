# services/booking-service/src/apps/core/services/__init__.py
"""
Booking Service Business Logic
"""

from .exceptions import (
    BookingServiceError,
    BookingValidationError,
    DuplicateReviewError,
    SlotConflictError,
    IllegalTransitionError,
    NotFoundError,
    BookingNotFoundError,
    ReviewNotFoundError,
    TransientStorageError,
)
from .availability_service import AvailabilityService
from .rating_service import RatingService, summarize_ratings
from .booking_service import BookingService
from .review_service import ReviewService
from .party_service import PartyDirectory


__all__ = [
    # Services
    'AvailabilityService',
    'BookingService',
    'RatingService',
    'ReviewService',
    'PartyDirectory',
    'summarize_ratings',

    # Exceptions
    'BookingServiceError',
    'BookingValidationError',
    'DuplicateReviewError',
    'SlotConflictError',
    'IllegalTransitionError',
    'NotFoundError',
    'BookingNotFoundError',
    'ReviewNotFoundError',
    'TransientStorageError',
]
