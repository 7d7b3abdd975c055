# services/booking-service/src/apps/api/views/__init__.py
"""
Booking API Views
"""

from .booking_views import BookingViewSet

from .review_views import (
    ReviewViewSet,
    ProviderStatsView,
    ProviderStatsRecomputeView,
)


__all__ = [
    # Booking
    'BookingViewSet',

    # Reviews and provider stats
    'ReviewViewSet',
    'ProviderStatsView',
    'ProviderStatsRecomputeView',
]
