# services/reservation-service/src/apps/core/engine.py
"""
Booking Engine

Entry point for callers of the reservation service. Payloads are plain
dictionaries validated by serializers; results are plain dictionaries.
"""

import logging
from typing import Any, Dict, List, Optional

from .serializers import (
    ResourceSelectionSerializer,
    IntervalSerializer,
    SlotQuerySerializer,
    BookingSerializer,
    WaitlistEntrySerializer,
)
from .services import (
    AvailabilityService,
    BookingService,
    BookingValidationError,
    CatalogService,
    PricingService,
    WaitlistService,
    get_lock_manager,
)

logger = logging.getLogger(__name__)


def _validated(serializer_class, data) -> Dict[str, Any]:
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise BookingValidationError(_format_errors(serializer.errors))
    return serializer.validated_data


def _format_errors(errors) -> str:
    if isinstance(errors, dict):
        parts = []
        for field, messages in errors.items():
            text = _format_errors(messages)
            parts.append(text if field == 'non_field_errors' else f"{field}: {text}")
        return '; '.join(parts)
    if isinstance(errors, (list, tuple)):
        return ', '.join(_format_errors(e) for e in errors)
    return str(errors)


class BookingEngine:
    """
    Facade over the availability, pricing, booking and waitlist services.

    Every call loads a fresh catalog snapshot.
    """

    def __init__(self, lock_manager=None, publisher=None, catalog: CatalogService = None):
        self.catalog = catalog or CatalogService()
        self.lock_manager = lock_manager or get_lock_manager()
        self.availability = AvailabilityService(catalog=self.catalog)
        self.pricing = PricingService(catalog=self.catalog)
        self.bookings = BookingService(
            lock_manager=self.lock_manager,
            catalog=self.catalog,
            publisher=publisher,
        )
        self.waitlist = WaitlistService(
            lock_manager=self.lock_manager,
            publisher=publisher,
        )

    def _request(self, selection, interval) -> Dict[str, Any]:
        if not isinstance(selection, dict) or not isinstance(interval, dict):
            raise BookingValidationError("selection and interval must be objects")
        data = dict(_validated(ResourceSelectionSerializer, selection))
        data.update(_validated(IntervalSerializer, interval))
        return data

    # ==========================================================================
    # Read Operations
    # ==========================================================================

    def check_availability(self, selection: dict, interval: dict) -> Dict[str, Any]:
        """Granular availability of a selection."""
        request = self._request(selection, interval)
        result = self.availability.check_all(
            request['court_id'],
            request['start'],
            request['end'],
            rackets=request['rackets'],
            shoes=request['shoes'],
            coach_id=request['coach_id'],
        )
        return result.to_dict()

    def quote(self, selection: dict, interval: dict) -> Dict[str, Any]:
        """Price breakdown for a selection. Nothing is persisted."""
        request = self._request(selection, interval)
        breakdown = self.pricing.quote(
            request['court_id'],
            request['start'],
            request['end'],
            rackets=request['rackets'],
            shoes=request['shoes'],
            coach_id=request['coach_id'],
        )
        return breakdown.to_dict()

    def list_user_bookings(
        self,
        requester_id,
        status: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        bookings = self.bookings.list_user_bookings(requester_id, status=status)
        return BookingSerializer(bookings, many=True).data

    def available_slots(self, court_id, date, duration_minutes: int = 60) -> List[Dict[str, Any]]:
        """Hourly slots for a court on a date."""
        query = _validated(SlotQuerySerializer, {
            'court_id': court_id,
            'date': date,
            'duration_minutes': duration_minutes,
        })
        return self.availability.get_available_slots(
            query['court_id'], query['date'], query['duration_minutes']
        )

    # ==========================================================================
    # Write Operations
    # ==========================================================================

    def reserve(self, requester_id, selection: dict, interval: dict) -> Dict[str, Any]:
        """Reserve a selection, raising BookingConflictError when taken."""
        request = self._request(selection, interval)
        booking = self.bookings.reserve(
            requester_id,
            request['court_id'],
            request['start'],
            request['end'],
            rackets=request['rackets'],
            shoes=request['shoes'],
            coach_id=request['coach_id'],
        )
        return BookingSerializer(booking).data

    def cancel(self, booking_id, reason: str = None) -> Dict[str, Any]:
        booking = self.bookings.cancel(booking_id, reason=reason)
        return BookingSerializer(booking).data

    def join_waitlist(self, requester_id, selection: dict, interval: dict) -> Dict[str, Any]:
        request = self._request(selection, interval)
        entry = self.waitlist.join(
            requester_id,
            request['court_id'],
            request['start'],
            request['end'],
            rackets=request['rackets'],
            shoes=request['shoes'],
            coach_id=request['coach_id'],
        )
        return WaitlistEntrySerializer(entry).data
