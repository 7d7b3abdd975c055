# services/booking-service/src/apps/core/signals.py
"""
Django Signals for Booking Service

Keeps provider aggregates in step with review and booking changes.
"""

import logging
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Booking, Review
from .events import publish_booking_deleted, publish_review_changed
from .services.rating_service import RatingService

logger = logging.getLogger(__name__)


# ==========================================================================
# Review Signals
# ==========================================================================

@receiver(post_save, sender=Review)
def review_post_save(sender, instance, created, **kwargs):
    """Recompute the provider rating after a review is written."""
    RatingService().recompute_provider_rating(instance.provider_id)
    publish_review_changed(instance, 'created' if created else 'updated')


@receiver(post_delete, sender=Review)
def review_post_delete(sender, instance, **kwargs):
    """Recompute the provider rating after a review is removed."""
    RatingService().recompute_provider_rating(instance.provider_id)
    publish_review_changed(instance, 'deleted')
    logger.info(f"Review deleted for provider {instance.provider_id}")


# ==========================================================================
# Booking Signals
# ==========================================================================

@receiver(post_delete, sender=Booking)
def booking_post_delete(sender, instance, **kwargs):
    """Refresh the completed counter when a completed booking disappears."""
    if instance.status == Booking.Status.COMPLETED:
        RatingService().refresh_completed_bookings(instance.provider_id)
    publish_booking_deleted(instance)
