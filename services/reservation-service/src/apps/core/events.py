# services/reservation-service/src/apps/core/events.py
"""
Reservation Service Events

Event definitions and publishing for the reservation service.
Publishing is the hand-off to the messaging collaborator; the service never
sends notifications itself.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for reservation service."""

    # Booking lifecycle events
    BOOKING_CONFIRMED = 'booking.confirmed'
    BOOKING_CANCELLED = 'booking.cancelled'

    # Waitlist events
    WAITLIST_ENTRY_CREATED = 'waitlist.entry_created'
    WAITLIST_ENTRY_NOTIFIED = 'waitlist.entry_notified'


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


# Events captured by the 'memory' backend
published_events: List[Dict[str, Any]] = []


def clear_published_events():
    published_events.clear()


class EventPublisher:
    """
    Event publisher for reservation service.

    Publishes events to the configured backend: log, memory, redis or
    webhook. Failures are logged and reported as False, never raised.
    """

    def __init__(self, backend: str = None):
        self.service_name = getattr(settings, 'SERVICE_NAME', 'reservation-service')
        self.enabled = getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)
        self.backend = backend

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
            event_type: Type of event (e.g., 'booking.confirmed')
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

            self._publish_to_backend(event_type, event_json)

            return True

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    def _publish_to_backend(self, event_type: str, event_json: str):
        """Publish to the configured message backend."""
        backend = self.backend or getattr(settings, 'EVENT_BACKEND', 'log')

        if backend == 'memory':
            published_events.append(json.loads(event_json))
        elif backend == 'redis':
            self._publish_redis(event_type, event_json)
        elif backend == 'webhook':
            self._publish_webhook(event_type, event_json)
        else:
            # Default: just log
            logger.debug(f"Event payload: {event_json[:500]}...")

    def _publish_redis(self, event_type: str, event_json: str):
        """Publish to Redis pub/sub."""
        import redis

        url = getattr(settings, 'EVENT_REDIS_URL', 'redis://localhost:6379/0')
        client = redis.Redis.from_url(url)
        try:
            client.publish(f"events:{event_type}", event_json)
        finally:
            client.close()

    def _publish_webhook(self, event_type: str, event_json: str):
        """Publish via webhook."""
        import httpx

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


# Global event publisher instance
event_publisher = EventPublisher()


# Convenience functions for publishing specific events
def publish_booking_confirmed(booking, publisher: EventPublisher = None) -> bool:
    """Publish booking confirmed event."""
    return (publisher or event_publisher).publish(
        EventType.BOOKING_CONFIRMED,
        payload={
            'booking_id': booking.id,
            'booking_number': booking.booking_number,
            'requester_id': booking.requester_id,
            'court_id': booking.court_id,
            'coach_id': booking.coach_id,
            'racket_count': booking.racket_count,
            'shoe_count': booking.shoe_count,
            'start_time': booking.start_time,
            'end_time': booking.end_time,
            'total_price': booking.total_price,
        }
    )


def publish_booking_cancelled(booking, publisher: EventPublisher = None) -> bool:
    """Publish booking cancelled event."""
    return (publisher or event_publisher).publish(
        EventType.BOOKING_CANCELLED,
        payload={
            'booking_id': booking.id,
            'booking_number': booking.booking_number,
            'requester_id': booking.requester_id,
            'court_id': booking.court_id,
            'start_time': booking.start_time,
            'end_time': booking.end_time,
            'reason': booking.cancellation_reason,
        }
    )


def publish_waitlist_entry_created(entry, publisher: EventPublisher = None) -> bool:
    """Publish waitlist entry created event."""
    return (publisher or event_publisher).publish(
        EventType.WAITLIST_ENTRY_CREATED,
        payload={
            'waitlist_entry_id': entry.id,
            'requester_id': entry.requester_id,
            'court_id': entry.court_id,
            'preferred_start': entry.preferred_start,
            'preferred_end': entry.preferred_end,
            'position': entry.position,
        }
    )


def publish_waitlist_entry_notified(entry, publisher: EventPublisher = None) -> bool:
    """Publish waitlist entry notified event."""
    return (publisher or event_publisher).publish(
        EventType.WAITLIST_ENTRY_NOTIFIED,
        payload={
            'waitlist_entry_id': entry.id,
            'requester_id': entry.requester_id,
            'court_id': entry.court_id,
            'preferred_start': entry.preferred_start,
            'preferred_end': entry.preferred_end,
            'position': entry.position,
            'notified_at': entry.notified_at,
            'booking_id': entry.notified_for_booking_id,
        }
    )
