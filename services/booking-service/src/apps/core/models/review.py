# services/booking-service/src/apps/core/models/review.py
"""
Review Model

Customer reviews of a provider's service. Reviews are the input of the
provider rating aggregate.
"""

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q


class Review(models.Model):
    """
    Review left by a customer for a service.

    A customer may review a given service only once.
    """

    MIN_RATING = 1
    MAX_RATING = 5

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer_id = models.UUIDField(db_index=True)
    provider_id = models.UUIDField(db_index=True)
    service_id = models.UUIDField(db_index=True)
    booking_id = models.UUIDField(blank=True, null=True)

    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)]
    )
    comment = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['customer_id', 'service_id'],
                name='uniq_review_per_customer_service'
            ),
            models.CheckConstraint(
                condition=Q(rating__gte=1) & Q(rating__lte=5),
                name='review_rating_range'
            ),
        ]

    def __str__(self):
        return f"Review {self.rating}/5 for provider {self.provider_id}"
