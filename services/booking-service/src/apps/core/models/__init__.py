# services/booking-service/src/apps/core/models/__init__.py
"""
Booking Service Models
"""

from .booking import Booking
from .review import Review
from .provider_stats import ProviderStats

__all__ = [
    'Booking',
    'Review',
    'ProviderStats',
]
