# services/booking-service/src/apps/core/events.py
"""
Booking Service Events

Event definitions and publishing for the booking service.
Collaborators (notifications, payments, provider profiles) consume these.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

import httpx
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for booking service."""

    # Booking lifecycle events
    BOOKING_CREATED = 'booking.created'
    BOOKING_UPDATED = 'booking.updated'
    BOOKING_STATUS_CHANGED = 'booking.status_changed'
    BOOKING_COMPLETED = 'booking.completed'
    BOOKING_CANCELLED = 'booking.cancelled'
    BOOKING_DELETED = 'booking.deleted'

    # Review and aggregate events
    REVIEW_CHANGED = 'review.changed'
    PROVIDER_STATS_UPDATED = 'provider.stats_updated'


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for booking service.

    The backend is chosen by settings.EVENT_BACKEND: 'log' (default),
    'webhook' (POST to EVENT_WEBHOOK_URL) or 'memory' (kept on the publisher,
    used by tests).
    """

    def __init__(self):
        self.service_name = getattr(settings, 'SERVICE_NAME', 'booking-service')
        self.sent: List[Dict[str, Any]] = []

    @property
    def enabled(self) -> bool:
        return getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        correlation_id: str = None,
        metadata: Dict[str, Any] = None
    ) -> bool:
        """
        Publish an event.

        Args:
            event_type: Type of event (e.g., 'booking.created')
            payload: Event data
            correlation_id: Optional correlation ID for tracing
            metadata: Additional metadata

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug(f"Event publishing disabled, skipping: {event_type}")
            return False

        event = {
            'event_type': event_type,
            'service': self.service_name,
            'timestamp': timezone.now().isoformat(),
            'correlation_id': correlation_id,
            'payload': payload,
            'metadata': metadata or {},
        }

        try:
            event_json = json.dumps(event, cls=JSONEncoder)

            logger.info(f"Publishing event: {event_type}", extra={
                'event_type': event_type,
            })

            self._publish_to_backend(event_type, event, event_json)
            return True

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    def _publish_to_backend(self, event_type: str, event: Dict[str, Any], event_json: str):
        """Publish to the configured message backend."""
        backend = getattr(settings, 'EVENT_BACKEND', 'log')

        if backend == 'webhook':
            self._publish_webhook(event_type, event_json)
        elif backend == 'memory':
            self.sent.append(json.loads(event_json))
        else:
            logger.debug(f"Event payload: {event_json[:500]}")

    def _publish_webhook(self, event_type: str, event_json: str):
        """Publish via webhook."""
        webhook_url = getattr(settings, 'EVENT_WEBHOOK_URL', None)
        if not webhook_url:
            return

        response = httpx.post(
            webhook_url,
            content=event_json,
            headers={
                'Content-Type': 'application/json',
                'X-Event-Type': event_type,
            },
            timeout=5.0
        )
        response.raise_for_status()

    def types_sent(self) -> List[str]:
        """Event types kept by the memory backend, oldest first."""
        return [event['event_type'] for event in self.sent]

    def clear(self):
        self.sent.clear()


# Global event publisher instance
event_publisher = EventPublisher()


def _booking_payload(booking) -> Dict[str, Any]:
    return {
        'booking_id': booking.id,
        'booking_number': booking.booking_number,
        'customer_id': booking.customer_id,
        'provider_id': booking.provider_id,
        'service_id': booking.service_id,
        'scheduled_date': booking.scheduled_date,
        'scheduled_time': booking.scheduled_time,
        'status': booking.status,
    }


# Convenience functions for publishing specific events
def publish_booking_created(booking):
    """Publish booking created event."""
    payload = _booking_payload(booking)
    payload.update({
        'payment_method_id': booking.payment_method_id,
        'payment_status': booking.payment_status,
        'pricing': booking.pricing,
    })
    event_publisher.publish(EventType.BOOKING_CREATED, payload=payload)


def publish_booking_updated(booking, changed_fields: List[str]):
    """Publish booking updated event."""
    payload = _booking_payload(booking)
    payload['changed_fields'] = changed_fields
    event_publisher.publish(EventType.BOOKING_UPDATED, payload=payload)


def publish_booking_status_changed(booking, old_status: str):
    """Publish status change, plus the terminal event when one applies."""
    payload = _booking_payload(booking)
    payload['old_status'] = old_status
    event_publisher.publish(EventType.BOOKING_STATUS_CHANGED, payload=payload)

    if booking.status == 'completed':
        payload['completed_at'] = booking.completed_at
        event_publisher.publish(EventType.BOOKING_COMPLETED, payload=payload)
    elif booking.status == 'cancelled':
        payload['cancelled_at'] = booking.cancelled_at
        event_publisher.publish(EventType.BOOKING_CANCELLED, payload=payload)


def publish_booking_deleted(booking):
    """Publish booking deleted event."""
    event_publisher.publish(EventType.BOOKING_DELETED, payload=_booking_payload(booking))


def publish_review_changed(review, action: str):
    """Publish review changed event."""
    event_publisher.publish(
        EventType.REVIEW_CHANGED,
        payload={
            'review_id': review.id,
            'provider_id': review.provider_id,
            'service_id': review.service_id,
            'customer_id': review.customer_id,
            'rating': review.rating,
            'action': action,
        }
    )


def publish_provider_stats_updated(stats):
    """Publish provider stats updated event."""
    event_publisher.publish(
        EventType.PROVIDER_STATS_UPDATED,
        payload={
            'provider_id': stats.provider_id,
            'rating': stats.rating,
            'total_reviews': stats.total_reviews,
            'completed_bookings': stats.completed_bookings,
        }
    )
