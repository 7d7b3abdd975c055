# services/booking-service/src/tests/unit/test_events.py
"""
Unit Tests for event publishing
"""

import httpx

from apps.core.events import EventPublisher, EventType


class TestEventPublisher:
    """Publishing never raises into the caller."""

    def test_memory_backend_keeps_events(self, settings):
        settings.EVENT_BACKEND = 'memory'
        publisher = EventPublisher()

        assert publisher.publish(EventType.BOOKING_CREATED, {'booking_id': 'b-1'})
        assert publisher.types_sent() == ['booking.created']

    def test_malformed_webhook_url(self, settings):
        settings.EVENT_BACKEND = 'webhook'
        settings.EVENT_WEBHOOK_URL = 'http://[::1/hook'

        assert EventPublisher().publish(EventType.BOOKING_UPDATED, {}) is False

    def test_unreachable_webhook(self, settings, monkeypatch):
        settings.EVENT_BACKEND = 'webhook'
        settings.EVENT_WEBHOOK_URL = 'http://events.internal/hook'

        def refuse(*args, **kwargs):
            raise httpx.ConnectError('connection refused')

        monkeypatch.setattr(httpx, 'post', refuse)

        assert EventPublisher().publish(EventType.BOOKING_DELETED, {}) is False

    def test_disabled(self, settings):
        settings.EVENT_PUBLISHING_ENABLED = False
        assert EventPublisher().publish(EventType.BOOKING_CREATED, {}) is False
