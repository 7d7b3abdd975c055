# services/booking-service/src/apps/api/serializers/__init__.py
"""
Booking API Serializers
"""

from .booking_serializers import (
    StatusField,
    PricingSerializer,
    BookingSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    BookingUpdateSerializer,
    BookingStatusSerializer,
    AvailabilityQuerySerializer,
)

from .review_serializers import (
    ReviewSerializer,
    ReviewCreateSerializer,
    ReviewUpdateSerializer,
    ProviderStatsSerializer,
)


__all__ = [
    # Booking
    'StatusField',
    'PricingSerializer',
    'BookingSerializer',
    'BookingListSerializer',
    'BookingCreateSerializer',
    'BookingUpdateSerializer',
    'BookingStatusSerializer',
    'AvailabilityQuerySerializer',

    # Reviews
    'ReviewSerializer',
    'ReviewCreateSerializer',
    'ReviewUpdateSerializer',
    'ProviderStatsSerializer',
]
