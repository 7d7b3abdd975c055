# services/booking-service/src/apps/core/services/booking_service.py
"""
Booking Service

Core business logic for booking creation, updates, lifecycle transitions
and listing.
"""

import uuid
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Dict, Any, List, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.events import (
    publish_booking_created,
    publish_booking_updated,
    publish_booking_status_changed,
)
from apps.core.models import Booking
from .availability_service import AvailabilityService
from .rating_service import RatingService
from .exceptions import (
    BookingValidationError,
    BookingNotFoundError,
    IllegalTransitionError,
    SlotConflictError,
    storage_errors,
)

logger = logging.getLogger(__name__)


class BookingService:
    """
    Service for managing bookings.

    Handles:
    - Booking creation with conflict detection
    - Field-mask updates and rescheduling
    - Status transitions
    - Filtered, paged listing
    """

    # Fields a PATCH may touch; status only changes through transition_status
    UPDATABLE_FIELDS = (
        'scheduled_date', 'scheduled_time',
        'customer_address_id', 'payment_method_id', 'payment_status',
        'pricing', 'special_instructions',
    )
    FILTER_FIELDS = (
        'status', 'customer_id', 'provider_id', 'service_id',
        'scheduled_date', 'payment_status',
    )

    def __init__(
        self,
        availability_service: AvailabilityService = None,
        rating_service: RatingService = None
    ):
        self.availability_service = availability_service or AvailabilityService()
        self.rating_service = rating_service or RatingService()

    # ==========================================================================
    # Booking CRUD
    # ==========================================================================

    def create_booking(
        self,
        customer_id: uuid.UUID,
        provider_id: uuid.UUID,
        service_id: uuid.UUID,
        scheduled_date: date,
        scheduled_time: str,
        customer_address_id: uuid.UUID,
        payment_method_id: uuid.UUID,
        pricing: Dict[str, Any],
        special_instructions: str = ''
    ) -> Booking:
        """
        Create a booking for a free provider slot.

        The availability check is a pre-check only. The partial unique
        constraint on the slot decides concurrent requests, and its violation
        is reported as SlotConflictError.
        """
        required = {
            'customer_id': customer_id,
            'provider_id': provider_id,
            'service_id': service_id,
            'scheduled_date': scheduled_date,
            'scheduled_time': scheduled_time,
            'customer_address_id': customer_address_id,
            'payment_method_id': payment_method_id,
        }
        for field, value in required.items():
            if value in (None, ''):
                raise BookingValidationError(f"{field} is required", field=field)

        pricing = self._validate_pricing(pricing)

        holder = self.availability_service.find_conflict(
            provider_id, scheduled_date, scheduled_time
        )
        if holder is not None:
            raise SlotConflictError(
                provider_id, scheduled_date, scheduled_time,
                held_by=holder.booking_number
            )

        max_attempts = getattr(settings, 'BOOKING_NUMBER_MAX_ATTEMPTS', 5)

        for attempt in range(1, max_attempts + 1):
            booking = Booking(
                booking_number=Booking.generate_booking_number(),
                customer_id=customer_id,
                provider_id=provider_id,
                service_id=service_id,
                scheduled_date=scheduled_date,
                scheduled_time=scheduled_time,
                customer_address_id=customer_address_id,
                payment_method_id=payment_method_id,
                pricing=pricing,
                special_instructions=special_instructions or '',
                status=Booking.Status.PENDING,
                payment_status=Booking.PaymentStatus.PENDING,
            )
            try:
                with storage_errors('create_booking'), transaction.atomic():
                    booking.save(force_insert=True)
                break
            except IntegrityError as exc:
                if self._is_booking_number_collision(exc, booking.booking_number):
                    logger.warning(
                        f"Booking number {booking.booking_number} collided "
                        f"(attempt {attempt}/{max_attempts})"
                    )
                    continue
                logger.info(
                    f"Slot {provider_id} {scheduled_date} {scheduled_time} "
                    f"taken concurrently"
                )
                raise SlotConflictError(
                    provider_id, scheduled_date, scheduled_time
                ) from exc
        else:
            raise BookingValidationError(
                "Could not allocate a unique booking number",
                field='booking_number'
            )

        logger.info(
            f"Created booking {booking.booking_number} for provider "
            f"{provider_id} on {scheduled_date} {scheduled_time}"
        )
        publish_booking_created(booking)

        return booking

    def get_booking(self, booking_id: uuid.UUID) -> Booking:
        """Get a booking by ID."""
        with storage_errors('get_booking'):
            try:
                return Booking.objects.get(id=booking_id)
            except Booking.DoesNotExist:
                raise BookingNotFoundError(booking_id)

    def update_booking(
        self,
        booking_id: uuid.UUID,
        changes: Dict[str, Any]
    ) -> Booking:
        """
        Apply a field mask to a booking.

        Only keys present in `changes` are written. A schedule change re-runs
        the conflict check against every other booking.
        """
        if 'status' in changes:
            raise BookingValidationError(
                "Status changes go through the status endpoint",
                field='status'
            )

        unknown = sorted(set(changes) - set(self.UPDATABLE_FIELDS))
        if unknown:
            raise BookingValidationError(
                f"Fields cannot be updated: {', '.join(unknown)}",
                details={'fields': unknown}
            )

        if 'pricing' in changes:
            changes = dict(changes, pricing=self._validate_pricing(changes['pricing']))

        if 'payment_status' in changes and \
                changes['payment_status'] not in Booking.PaymentStatus.values:
            raise BookingValidationError(
                f"Invalid payment status: {changes['payment_status']}",
                field='payment_status'
            )

        try:
            with storage_errors('update_booking'), transaction.atomic():
                booking = self._get_for_update(booking_id)

                if booking.is_terminal:
                    raise IllegalTransitionError(
                        booking.status,
                        booking.status,
                        message=f"Cannot update booking in {booking.status} status"
                    )

                new_date = changes.get('scheduled_date', booking.scheduled_date)
                new_time = changes.get('scheduled_time', booking.scheduled_time)
                reschedule = (
                    new_date != booking.scheduled_date or
                    new_time != booking.scheduled_time
                )

                holder = self.availability_service.find_conflict(
                    booking.provider_id, new_date, new_time,
                    exclude_booking_id=booking.id
                ) if reschedule else None
                if holder is not None:
                    raise SlotConflictError(
                        booking.provider_id, new_date, new_time,
                        held_by=holder.booking_number
                    )

                changed_fields = []
                for field, value in changes.items():
                    setattr(booking, field, value)
                    changed_fields.append(field)

                if changed_fields:
                    booking.save(update_fields=changed_fields + ['updated_at'])

        except IntegrityError as exc:
            raise SlotConflictError(
                booking.provider_id, new_date, new_time
            ) from exc

        logger.info(f"Updated booking {booking.booking_number}: {changed_fields}")
        if changed_fields:
            publish_booking_updated(booking, changed_fields)
        return booking

    def delete_booking(self, booking_id: uuid.UUID) -> None:
        """Hard delete a booking."""
        with storage_errors('delete_booking'):
            booking = self.get_booking(booking_id)
            booking.delete()

        logger.info(f"Deleted booking {booking.booking_number}")

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def transition_status(
        self,
        booking_id: uuid.UUID,
        new_status: str
    ) -> Booking:
        """
        Move a booking to a new lifecycle status.

        The update is a compare-and-swap on the current status under a row
        lock, so two concurrent transitions cannot both apply.
        """
        try:
            target = Booking.normalize_status(new_status)
        except ValueError:
            raise BookingValidationError(
                f"Invalid status: {new_status}",
                field='status',
                details={'allowed': list(Booking.Status.values)}
            )

        with storage_errors('transition_status'), transaction.atomic():
            booking = self._get_for_update(booking_id)
            old_status = booking.status

            if not booking.can_transition_to(target):
                raise IllegalTransitionError(old_status, target)

            now = timezone.now()
            fields = {'status': target, 'updated_at': now}
            if target == Booking.Status.COMPLETED:
                fields['completed_at'] = now
            elif target == Booking.Status.CANCELLED:
                fields['cancelled_at'] = now

            updated = Booking.objects.filter(
                id=booking.id, status=old_status
            ).update(**fields)

            if not updated:
                current = Booking.objects.filter(id=booking.id).values_list(
                    'status', flat=True
                ).first()
                raise IllegalTransitionError(current or old_status, target)

            for field, value in fields.items():
                setattr(booking, field, value)

        logger.info(
            f"Booking {booking.booking_number} moved {old_status} -> {target}"
        )

        if target == Booking.Status.COMPLETED:
            self.rating_service.refresh_completed_bookings(booking.provider_id)

        publish_booking_status_changed(booking, old_status)
        return booking

    # ==========================================================================
    # Listing
    # ==========================================================================

    def list_bookings(
        self,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Booking], int]:
        """
        List bookings newest first.

        `filters` is a conjunction over FILTER_FIELDS; empty values are
        ignored. A page past the end yields no items and the real total.
        """
        if page < 1:
            raise BookingValidationError("page must be >= 1", field='page')
        if page_size < 1:
            raise BookingValidationError("page_size must be >= 1", field='page_size')

        queryset = Booking.objects.all()

        for field, value in (filters or {}).items():
            if value in (None, ''):
                continue
            if field not in self.FILTER_FIELDS:
                raise BookingValidationError(f"Unknown filter: {field}", field=field)
            if field == 'status':
                value = self._normalize_filter_status(value)
            queryset = queryset.filter(**{field: value})

        queryset = queryset.order_by('-created_at', '-id')
        offset = (page - 1) * page_size

        with storage_errors('list_bookings'):
            total = queryset.count()
            items = list(queryset[offset:offset + page_size]) if offset < total else []

        return items, total

    def list_customer_bookings(self, customer_id, page=1, page_size=20):
        return self.list_bookings({'customer_id': customer_id}, page, page_size)

    def list_provider_bookings(self, provider_id, status=None, page=1, page_size=20):
        return self.list_bookings(
            {'provider_id': provider_id, 'status': status}, page, page_size
        )

    def list_service_bookings(self, service_id, page=1, page_size=20):
        return self.list_bookings({'service_id': service_id}, page, page_size)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _get_for_update(self, booking_id: uuid.UUID) -> Booking:
        try:
            return Booking.objects.select_for_update().get(id=booking_id)
        except Booking.DoesNotExist:
            raise BookingNotFoundError(booking_id)

    def _validate_pricing(self, pricing: Dict[str, Any]) -> Dict[str, Any]:
        """Check the pricing snapshot carries a positive total."""
        if not isinstance(pricing, dict):
            raise BookingValidationError("pricing must be an object", field='pricing')

        try:
            total = Decimal(str(pricing.get('total_amount')))
        except (InvalidOperation, ValueError):
            raise BookingValidationError(
                "pricing.total_amount must be a number",
                field='pricing.total_amount'
            )

        if not total.is_finite() or total <= 0:
            raise BookingValidationError(
                "pricing.total_amount must be positive",
                field='pricing.total_amount'
            )

        return pricing

    @staticmethod
    def _normalize_filter_status(value: str) -> str:
        try:
            return Booking.normalize_status(value)
        except ValueError:
            raise BookingValidationError(f"Invalid status: {value}", field='status')

    @staticmethod
    def _is_booking_number_collision(exc: IntegrityError, booking_number: str) -> bool:
        message = str(exc).lower()
        if 'booking_number' in message:
            return True
        return Booking.objects.filter(booking_number=booking_number).exists()
