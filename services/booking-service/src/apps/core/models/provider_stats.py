# services/booking-service/src/apps/core/models/provider_stats.py
"""
Provider Statistics Model

Derived per-provider aggregates. Only the rating service writes these rows.
"""

from decimal import Decimal

from django.db import models


class ProviderStats(models.Model):
    """Rating, review count and completed-booking count of a provider."""

    provider_id = models.UUIDField(primary_key=True)

    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal('0.00')
    )
    total_reviews = models.PositiveIntegerField(default=0)
    completed_bookings = models.PositiveIntegerField(default=0)

    rating_updated_at = models.DateTimeField(blank=True, null=True)
    bookings_updated_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'provider_stats'
        verbose_name_plural = 'provider stats'

    def __str__(self):
        return f"{self.provider_id}: {self.rating} ({self.total_reviews} reviews)"

    @classmethod
    def empty(cls, provider_id):
        """Unsaved stats row for a provider nobody has reviewed or booked yet."""
        return cls(provider_id=provider_id)
