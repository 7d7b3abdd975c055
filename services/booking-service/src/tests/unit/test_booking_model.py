# services/booking-service/src/tests/unit/test_booking_model.py
"""
Unit Tests for Booking Models

Tests for status handling, booking numbers and the slot constraint.
"""

import pytest
from django.db import IntegrityError, transaction

from apps.core.models import Booking, ProviderStats


class TestBookingStatus:
    """Tests for status normalization and the transition table."""

    @pytest.mark.parametrize('raw, expected', [
        ('COMPLETED', 'completed'),
        (' Completed ', 'completed'),
        ('in-progress', 'in_progress'),
        ('In Progress', 'in_progress'),
        ('pending', 'pending'),
    ])
    def test_normalize_status(self, raw, expected):
        assert Booking.normalize_status(raw) == expected

    @pytest.mark.parametrize('raw', ['done', '', None, 3])
    def test_normalize_status_rejects_unknown(self, raw):
        with pytest.raises(ValueError):
            Booking.normalize_status(raw)

    def test_forward_chain_is_allowed(self):
        booking = Booking(status=Booking.Status.PENDING)
        chain = ['accepted', 'confirmed', 'in_progress', 'completed']

        for status in chain:
            assert booking.can_transition_to(status)
            booking.status = status

    @pytest.mark.parametrize('current, target', [
        (current, target)
        for current in Booking.Status.values
        for target in Booking.Status.values
    ])
    def test_only_table_edges_are_allowed(self, current, target):
        allowed = target in Booking.TRANSITIONS[current]
        assert Booking(status=current).can_transition_to(target) is allowed

    @pytest.mark.parametrize('current, target', [
        ('accepted', 'pending'),
        ('confirmed', 'accepted'),
        ('in_progress', 'confirmed'),
        ('pending', 'pending'),
        ('cancelled', 'cancelled'),
    ])
    def test_backward_and_self_edges_are_rejected(self, current, target):
        assert not Booking(status=current).can_transition_to(target)

    def test_skipping_states_is_not_allowed(self):
        booking = Booking(status=Booking.Status.PENDING)
        assert not booking.can_transition_to('completed')
        assert not booking.can_transition_to('in_progress')

    def test_cancel_from_every_active_state(self):
        for status in Booking.get_active_statuses():
            assert Booking(status=status).can_transition_to('cancelled')

    def test_terminal_states_have_no_exits(self):
        for status in Booking.TERMINAL_STATUSES:
            booking = Booking(status=status)
            assert booking.is_terminal
            assert not any(
                booking.can_transition_to(target) for target in Booking.Status.values
            )


class TestBookingNumber:
    """Tests for booking number generation."""

    def test_format(self, settings):
        settings.BOOKING_NUMBER_PREFIX = 'AME'
        number = Booking.generate_booking_number()

        assert number.startswith('AME')
        assert len(number) == 9
        assert number[3:].isalnum() and number[3:].upper() == number[3:]

    @pytest.mark.django_db
    def test_assigned_on_save(self, create_booking):
        booking = create_booking()
        assert booking.booking_number


@pytest.mark.django_db
class TestSlotConstraint:
    """Tests for the storage-level slot guard."""

    def test_second_active_booking_rejected(self, create_booking):
        create_booking()

        with pytest.raises(IntegrityError), transaction.atomic():
            create_booking()

    def test_terminal_bookings_do_not_hold_the_slot(self, create_booking):
        create_booking(status=Booking.Status.CANCELLED)
        create_booking(status=Booking.Status.COMPLETED)

        active = create_booking()
        assert active.status == Booking.Status.PENDING

    def test_slot_holders_excludes_given_booking(self, create_booking):
        booking = create_booking()

        holders = Booking.get_slot_holders(
            booking.provider_id, booking.scheduled_date, booking.scheduled_time,
            exclude_booking_id=booking.id
        )
        assert not holders.exists()


class TestProviderStats:
    def test_empty_row(self, provider_id):
        stats = ProviderStats.empty(provider_id)
        assert stats.provider_id == provider_id
        assert stats.total_reviews == 0
        assert stats.completed_bookings == 0
