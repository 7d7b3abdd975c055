# services/booking-service/src/apps/core/services/rating_service.py
"""
Rating Service

Keeps the provider aggregates (rating, review count, completed bookings)
derived from the underlying reviews and bookings.
"""

import uuid
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Iterable, Optional, Tuple

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.events import publish_provider_stats_updated
from apps.core.models import Booking, ProviderStats, Review
from .exceptions import TransientStorageError, storage_errors

logger = logging.getLogger(__name__)

RATING_PRECISION = Decimal('0.01')


def summarize_ratings(ratings: Iterable[int]) -> Tuple[Decimal, int]:
    """
    Mean and count of a set of review ratings.

    The mean is rounded half-up to two places; an empty set yields (0, 0).
    """
    ratings = list(ratings)
    if not ratings:
        return Decimal('0.00'), 0

    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return mean.quantize(RATING_PRECISION, rounding=ROUND_HALF_UP), len(ratings)


class RatingService:
    """
    Service for provider aggregates.

    Every refresh is a full recomputation from the current records, so
    concurrent refreshes may race but the last one always reflects a real
    review set. Write failures are logged and never propagate to the
    operation that triggered the refresh.
    """

    def get_stats(self, provider_id: uuid.UUID) -> ProviderStats:
        """Get the provider's stats, or an unsaved zero row."""
        with storage_errors('get_stats'):
            try:
                return ProviderStats.objects.get(provider_id=provider_id)
            except ProviderStats.DoesNotExist:
                return ProviderStats.empty(provider_id)

    def recompute_provider_rating(self, provider_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        """
        Recompute rating and total_reviews from all reviews of the provider.

        Returns None when the aggregate could not be refreshed.
        """
        try:
            with transaction.atomic():
                ratings = Review.objects.filter(
                    provider_id=provider_id
                ).values_list('rating', flat=True)
                rating, total_reviews = summarize_ratings(ratings)

                stats, _ = ProviderStats.objects.update_or_create(
                    provider_id=provider_id,
                    defaults={
                        'rating': rating,
                        'total_reviews': total_reviews,
                        'rating_updated_at': timezone.now(),
                    },
                )
        except DatabaseError:
            logger.exception(
                f"Failed to recompute rating for provider {provider_id}",
                extra={'provider_id': str(provider_id)}
            )
            return None

        logger.info(
            f"Recomputed rating for provider {provider_id}: "
            f"{rating} over {total_reviews} reviews"
        )
        publish_provider_stats_updated(stats)
        return {'rating': rating, 'total_reviews': total_reviews}

    def refresh_completed_bookings(self, provider_id: uuid.UUID) -> Optional[int]:
        """
        Recompute the provider's completed-booking counter.

        Returns None when the counter could not be refreshed.
        """
        try:
            with transaction.atomic():
                completed = Booking.objects.filter(
                    provider_id=provider_id,
                    status=Booking.Status.COMPLETED
                ).count()

                stats, _ = ProviderStats.objects.update_or_create(
                    provider_id=provider_id,
                    defaults={
                        'completed_bookings': completed,
                        'bookings_updated_at': timezone.now(),
                    },
                )
        except DatabaseError:
            logger.exception(
                f"Failed to refresh completed bookings for provider {provider_id}",
                extra={'provider_id': str(provider_id)}
            )
            return None

        logger.info(f"Provider {provider_id} has {completed} completed bookings")
        publish_provider_stats_updated(stats)
        return completed

    def recompute_all(self, provider_id: uuid.UUID) -> ProviderStats:
        """Recompute every aggregate of a provider and return the fresh row."""
        rating = self.recompute_provider_rating(provider_id)
        completed = self.refresh_completed_bookings(provider_id)

        if rating is None or completed is None:
            raise TransientStorageError(operation='recompute_all')

        return self.get_stats(provider_id)
