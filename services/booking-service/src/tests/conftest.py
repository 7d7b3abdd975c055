# services/booking-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for booking service tests.
"""

import uuid
from datetime import date, timedelta

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.core.events import event_publisher
from shared.common.authentication import TokenUser


@pytest.fixture(autouse=True)
def clean_side_channels():
    """Reset the in-memory event log and cache between tests."""
    event_publisher.clear()
    cache.clear()
    yield
    event_publisher.clear()


@pytest.fixture
def customer_id():
    """Provide a test customer ID."""
    return uuid.uuid4()


@pytest.fixture
def provider_id():
    """Provide a test provider ID."""
    return uuid.uuid4()


@pytest.fixture
def service_id():
    """Provide a test catalog service ID."""
    return uuid.uuid4()


@pytest.fixture
def booking_day():
    """A future date for scheduling."""
    return date.today() + timedelta(days=3)


@pytest.fixture
def api_client(customer_id):
    """API client authenticated as a customer."""
    client = APIClient()
    client.force_authenticate(user=TokenUser({
        'sub': str(customer_id),
        'email': 'customer@example.com',
        'role': 'customer',
    }))
    return client


@pytest.fixture
def sample_booking_data(customer_id, provider_id, service_id, booking_day):
    """Provide sample booking creation data."""
    return {
        'customer_id': customer_id,
        'provider_id': provider_id,
        'service_id': service_id,
        'scheduled_date': booking_day,
        'scheduled_time': '09:00-11:00',
        'customer_address_id': uuid.uuid4(),
        'payment_method_id': uuid.uuid4(),
        'pricing': {
            'base_amount': '100.00',
            'tax': '8.00',
            'total_amount': '108.00',
            'currency': 'USD',
        },
        'special_instructions': 'Ring the side door',
    }


@pytest.fixture
def create_booking(customer_id, provider_id, service_id, booking_day):
    """Factory fixture for creating bookings directly in storage."""
    from apps.core.models import Booking

    def _create_booking(**kwargs):
        defaults = {
            'customer_id': customer_id,
            'provider_id': provider_id,
            'service_id': service_id,
            'scheduled_date': booking_day,
            'scheduled_time': '09:00-11:00',
            'customer_address_id': uuid.uuid4(),
            'payment_method_id': uuid.uuid4(),
            'pricing': {'total_amount': '50.00', 'currency': 'USD'},
            'status': Booking.Status.PENDING,
        }
        defaults.update(kwargs)

        return Booking.objects.create(**defaults)

    return _create_booking


@pytest.fixture
def create_review(customer_id, provider_id):
    """Factory fixture for creating reviews."""
    from apps.core.models import Review

    def _create_review(**kwargs):
        defaults = {
            'customer_id': customer_id,
            'provider_id': provider_id,
            'service_id': uuid.uuid4(),
            'rating': 5,
        }
        defaults.update(kwargs)

        return Review.objects.create(**defaults)

    return _create_review
