# services/booking-service/src/apps/core/services/availability_service.py
"""
Availability Service

Answers whether a provider slot is free. Availability is derived from the
active bookings; nothing is stored per slot.
"""

import uuid
import logging
from datetime import date
from typing import Optional, List

from apps.core.models import Booking
from .exceptions import storage_errors

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Conflict checker for provider slots.

    A slot (provider, date, time) is taken while a booking in a non-terminal
    status holds it. The provider itself is not validated here.
    """

    def is_slot_available(
        self,
        provider_id: uuid.UUID,
        scheduled_date: date,
        scheduled_time: str,
        exclude_booking_id: uuid.UUID = None
    ) -> bool:
        """Check whether no active booking holds the slot."""
        with storage_errors('is_slot_available'):
            return not Booking.get_slot_holders(
                provider_id,
                scheduled_date,
                scheduled_time,
                exclude_booking_id=exclude_booking_id,
            ).exists()

    def find_conflict(
        self,
        provider_id: uuid.UUID,
        scheduled_date: date,
        scheduled_time: str,
        exclude_booking_id: uuid.UUID = None
    ) -> Optional[Booking]:
        """Return the active booking holding the slot, if any."""
        with storage_errors('find_conflict'):
            return Booking.get_slot_holders(
                provider_id,
                scheduled_date,
                scheduled_time,
                exclude_booking_id=exclude_booking_id,
            ).first()

    def get_booked_slots(
        self,
        provider_id: uuid.UUID,
        scheduled_date: date
    ) -> List[str]:
        """List the slot identifiers a provider has taken on a date."""
        with storage_errors('get_booked_slots'):
            slots = Booking.get_slot_holders(
                provider_id, scheduled_date
            ).order_by('scheduled_time').values_list('scheduled_time', flat=True)
            return list(slots)
