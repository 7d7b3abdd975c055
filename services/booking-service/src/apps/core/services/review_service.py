# services/booking-service/src/apps/core/services/review_service.py
"""
Review Service

Review records feeding the provider rating. Saving or deleting a review
triggers the rating recomputation through the model signals.
"""

import uuid
import logging
from typing import Optional, Dict, Any

from django.db import IntegrityError, transaction

from apps.core.models import Booking, Review
from .exceptions import (
    BookingNotFoundError,
    BookingValidationError,
    DuplicateReviewError,
    ReviewNotFoundError,
    storage_errors,
)

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Service for managing reviews.

    Handles:
    - One review per customer and service
    - Reviews tied to a booking require that booking to be completed
    """

    UPDATABLE_FIELDS = ('rating', 'comment')
    FILTER_FIELDS = ('provider_id', 'customer_id', 'service_id')

    def create_review(
        self,
        customer_id: uuid.UUID,
        provider_id: uuid.UUID,
        service_id: uuid.UUID,
        rating: int,
        comment: str = '',
        booking_id: uuid.UUID = None
    ) -> Review:
        """Create a review."""
        self._validate_rating(rating)

        if booking_id:
            self._check_booking_reviewable(booking_id, customer_id, provider_id, service_id)

        with storage_errors('create_review'):
            if Review.objects.filter(
                customer_id=customer_id, service_id=service_id
            ).exists():
                raise DuplicateReviewError(customer_id, service_id)

            try:
                with transaction.atomic():
                    review = Review.objects.create(
                        customer_id=customer_id,
                        provider_id=provider_id,
                        service_id=service_id,
                        booking_id=booking_id,
                        rating=rating,
                        comment=comment or '',
                    )
            except IntegrityError as exc:
                raise DuplicateReviewError(customer_id, service_id) from exc

        logger.info(
            f"Created review {review.id} ({rating}/5) for provider {provider_id}"
        )
        return review

    def get_review(self, review_id: uuid.UUID) -> Review:
        """Get a review by ID."""
        with storage_errors('get_review'):
            try:
                return Review.objects.get(id=review_id)
            except Review.DoesNotExist:
                raise ReviewNotFoundError(review_id)

    def list_reviews(self, filters: Optional[Dict[str, Any]] = None):
        """Reviews newest first, optionally filtered by provider, customer or service."""
        queryset = Review.objects.all()
        for field, value in (filters or {}).items():
            if value in (None, '') or field not in self.FILTER_FIELDS:
                continue
            queryset = queryset.filter(**{field: value})
        return queryset.order_by('-created_at', '-id')

    def update_review(self, review_id: uuid.UUID, changes: Dict[str, Any]) -> Review:
        """Update rating and/or comment."""
        unknown = sorted(set(changes) - set(self.UPDATABLE_FIELDS))
        if unknown:
            raise BookingValidationError(
                f"Fields cannot be updated: {', '.join(unknown)}",
                details={'fields': unknown}
            )

        if 'rating' in changes:
            self._validate_rating(changes['rating'])

        review = self.get_review(review_id)
        for field, value in changes.items():
            setattr(review, field, value)

        with storage_errors('update_review'):
            review.save()

        logger.info(f"Updated review {review.id}")
        return review

    def delete_review(self, review_id: uuid.UUID) -> None:
        """Delete a review."""
        review = self.get_review(review_id)

        with storage_errors('delete_review'):
            review.delete()

        logger.info(f"Deleted review {review_id} for provider {review.provider_id}")

    # ==========================================================================
    # Validation
    # ==========================================================================

    def _validate_rating(self, rating):
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise BookingValidationError("Rating must be an integer", field='rating')
        if not Review.MIN_RATING <= rating <= Review.MAX_RATING:
            raise BookingValidationError(
                f"Rating must be between {Review.MIN_RATING} and {Review.MAX_RATING}",
                field='rating'
            )

    def _check_booking_reviewable(
        self,
        booking_id: uuid.UUID,
        customer_id: uuid.UUID,
        provider_id: uuid.UUID,
        service_id: uuid.UUID
    ):
        with storage_errors('check_booking_reviewable'):
            try:
                booking = Booking.objects.get(id=booking_id)
            except Booking.DoesNotExist:
                raise BookingNotFoundError(booking_id)

        if booking.status != Booking.Status.COMPLETED:
            raise BookingValidationError(
                "Can only review completed bookings",
                field='booking_id'
            )

        mismatched = [
            field for field, value in (
                ('customer_id', customer_id),
                ('provider_id', provider_id),
                ('service_id', service_id),
            )
            if str(getattr(booking, field)) != str(value)
        ]
        if mismatched:
            raise BookingValidationError(
                "Review does not match the booking",
                field='booking_id',
                details={'mismatched': mismatched}
            )
