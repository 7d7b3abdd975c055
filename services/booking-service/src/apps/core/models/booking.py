# services/booking-service/src/apps/core/models/booking.py
"""
Booking Model

Service appointments between customers and providers, with the
lifecycle state machine and the per-slot uniqueness guard.
"""

import secrets
import string
import uuid

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import Q


BOOKING_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
BOOKING_NUMBER_LENGTH = 6


class Booking(models.Model):
    """
    Booking of a provider's service by a customer.

    A provider slot (provider_id, scheduled_date, scheduled_time) is held by
    at most one booking whose status is not terminal. The database enforces
    this with a partial unique constraint.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        CONFIRMED = 'confirmed', 'Confirmed'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    class PaymentStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PAID = 'paid', 'Paid'
        FAILED = 'failed', 'Failed'
        REFUNDED = 'refunded', 'Refunded'

    TERMINAL_STATUSES = (Status.COMPLETED, Status.CANCELLED)

    # Legal lifecycle edges; cancellation is allowed from every non-terminal state
    TRANSITIONS = {
        Status.PENDING: (Status.ACCEPTED, Status.CANCELLED),
        Status.ACCEPTED: (Status.CONFIRMED, Status.CANCELLED),
        Status.CONFIRMED: (Status.IN_PROGRESS, Status.CANCELLED),
        Status.IN_PROGRESS: (Status.COMPLETED, Status.CANCELLED),
        Status.COMPLETED: (),
        Status.CANCELLED: (),
    }

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Booking Number
    booking_number = models.CharField(max_length=20, unique=True, db_index=True)

    # Parties
    customer_id = models.UUIDField(db_index=True)
    provider_id = models.UUIDField(db_index=True)
    service_id = models.UUIDField(db_index=True)

    # Schedule
    scheduled_date = models.DateField()
    scheduled_time = models.CharField(max_length=20)

    # Address and payment references
    customer_address_id = models.UUIDField()
    payment_method_id = models.UUIDField()

    # Pricing snapshot
    pricing = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    special_instructions = models.TextField(blank=True, default='')

    # Lifecycle timestamps
    completed_at = models.DateTimeField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)

    # Audit
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['provider_id', 'scheduled_date']),
            models.Index(fields=['customer_id', 'created_at']),
            models.Index(fields=['service_id', 'created_at']),
            models.Index(fields=['status', 'created_at']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['provider_id', 'scheduled_date', 'scheduled_time'],
                condition=~Q(status__in=['completed', 'cancelled']),
                name='uniq_active_booking_per_provider_slot'
            ),
        ]

    def __str__(self):
        return f"{self.booking_number}: {self.scheduled_date} {self.scheduled_time}"

    def save(self, *args, **kwargs):
        if not self.booking_number:
            self.booking_number = self.generate_booking_number()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_number() -> str:
        """Generate a vanity booking number such as AME7K2Q9D."""
        prefix = getattr(settings, 'BOOKING_NUMBER_PREFIX', 'AME')
        suffix = ''.join(
            secrets.choice(BOOKING_NUMBER_ALPHABET)
            for _ in range(BOOKING_NUMBER_LENGTH)
        )
        return f"{prefix}{suffix}"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_terminal(self) -> bool:
        """Terminal bookings no longer hold their slot."""
        return self.status in self.TERMINAL_STATUSES

    # ==========================================================================
    # State Machine
    # ==========================================================================

    @classmethod
    def normalize_status(cls, value) -> str:
        """
        Map a caller-supplied status onto its canonical value.

        "COMPLETED", " Completed " and "in-progress" are all accepted.
        Raises ValueError for anything outside the enumeration.
        """
        if not isinstance(value, str):
            raise ValueError(f"Invalid status: {value!r}")

        normalized = value.strip().lower().replace('-', '_').replace(' ', '_')
        if normalized not in cls.Status.values:
            raise ValueError(f"Invalid status: {value!r}")
        return normalized

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether new_status is a legal next state."""
        return new_status in self.TRANSITIONS.get(self.status, ())

    # ==========================================================================
    # Class Methods
    # ==========================================================================

    @classmethod
    def get_active_statuses(cls) -> list:
        """Get list of active (non-terminal) statuses."""
        return [
            status for status in cls.Status.values
            if status not in cls.TERMINAL_STATUSES
        ]

    @classmethod
    def get_slot_holders(
        cls,
        provider_id: uuid.UUID,
        scheduled_date,
        scheduled_time: str = None,
        exclude_booking_id: uuid.UUID = None
    ):
        """Find active bookings holding a provider's slot (or any slot on a date)."""
        queryset = cls.objects.filter(
            provider_id=provider_id,
            scheduled_date=scheduled_date,
            status__in=cls.get_active_statuses()
        )

        if scheduled_time is not None:
            queryset = queryset.filter(scheduled_time=scheduled_time)

        if exclude_booking_id:
            queryset = queryset.exclude(id=exclude_booking_id)

        return queryset
