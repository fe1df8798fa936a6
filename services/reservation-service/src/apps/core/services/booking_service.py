# services/reservation-service/src/apps/core/services/booking_service.py
"""
Booking Service

Core business logic for reservation management: atomic check, price and
commit under resource locks, cancellation and waitlist cascade dispatch.
"""

import uuid
import logging
from datetime import datetime
from typing import Optional, List

from django.conf import settings

from apps.core.events import (
    EventPublisher,
    event_publisher,
    publish_booking_confirmed,
    publish_booking_cancelled,
)
from apps.core.models import Booking
from .availability_service import AvailabilityService
from .catalog_service import CatalogService
from .lock_manager import get_lock_manager, locked_transaction, resource_keys
from .pricing_service import PricingService
from .validation import validate_id, validate_resource_request

logger = logging.getLogger(__name__)


class BookingService:
    """
    Service for managing bookings.

    Handles:
    - Reservation under resource locks
    - Cancellation and waitlist cascade
    - Booking queries
    """

    def __init__(
        self,
        lock_manager=None,
        catalog: CatalogService = None,
        publisher: EventPublisher = None,
    ):
        self.lock_manager = lock_manager or get_lock_manager()
        self.catalog = catalog or CatalogService()
        self.publisher = publisher or event_publisher
        self.availability = AvailabilityService(catalog=self.catalog)
        self.pricing = PricingService(catalog=self.catalog)

    # ==========================================================================
    # Reservation
    # ==========================================================================

    def reserve(
        self,
        requester_id: uuid.UUID,
        court_id: uuid.UUID,
        start: datetime,
        end: datetime,
        rackets: int = 0,
        shoes: int = 0,
        coach_id: uuid.UUID = None
    ) -> Booking:
        """
        Reserve a court with optional equipment and coach.

        Availability is re-checked against committed state while every
        contended resource key is held. Raises BookingConflictError with the
        granular availability result when any resource is taken.
        """
        from . import BookingConflictError

        requester_id = validate_id(requester_id, 'requester_id')
        request = validate_resource_request(court_id, start, end, rackets, shoes, coach_id)

        keys = resource_keys(
            request.court_id, request.rackets, request.shoes, request.coach_id
        )

        with locked_transaction(self.lock_manager, keys):
            snapshot = self.catalog.load_snapshot(
                court_ids=[request.court_id],
                coach_ids=[request.coach_id] if request.coach_id else [],
            )

            availability = self.availability.check_all(
                request.court_id,
                request.start,
                request.end,
                rackets=request.rackets,
                shoes=request.shoes,
                coach_id=request.coach_id,
                snapshot=snapshot,
            )

            if not availability.all_available:
                logger.warning(
                    f"Rejected reservation on court {request.court_id} for "
                    f"{request.start.isoformat()}: {availability.to_dict()}"
                )
                raise BookingConflictError(
                    "Requested resources are not available",
                    availability=availability,
                )

            breakdown = self.pricing.calculate(
                snapshot,
                request.court_id,
                request.start,
                request.end,
                rackets=request.rackets,
                shoes=request.shoes,
                coach_id=request.coach_id,
            )
            prices = breakdown.rounded()

            booking = Booking.objects.create(
                requester_id=requester_id,
                court_id=request.court_id,
                start_time=request.start,
                end_time=request.end,
                racket_count=request.rackets,
                shoe_count=request.shoes,
                coach_id=request.coach_id,
                status=Booking.Status.CONFIRMED,
                base_price=prices['base_price'],
                court_price=prices['court_price'],
                equipment_price=prices['equipment_price'],
                coach_price=prices['coach_price'],
                total_price=prices['total'],
                applied_rules=[rule.to_dict() for rule in breakdown.applied_rules],
                catalog_version=breakdown.catalog_version,
            )

        logger.info(
            f"Confirmed booking {booking.booking_number} on court {booking.court_id} "
            f"for {booking.start_time.strftime('%Y-%m-%d %H:%M')}"
        )

        publish_booking_confirmed(booking, self.publisher)

        return booking

    # ==========================================================================
    # Cancellation
    # ==========================================================================

    def cancel(self, booking_id: uuid.UUID, reason: str = None) -> Booking:
        """
        Cancel a confirmed booking and cascade to the waitlist.

        Cancelling twice raises BookingConflictError and does not cascade
        again.
        """
        from . import BookingConflictError

        booking = self.get_booking(booking_id)

        keys = resource_keys(
            booking.court_id, booking.racket_count, booking.shoe_count, booking.coach_id
        )

        with locked_transaction(self.lock_manager, keys):
            booking = Booking.objects.select_for_update().get(id=booking.id)

            if not booking.is_confirmed:
                raise BookingConflictError(
                    f"Booking {booking.booking_number} is already {booking.status}"
                )

            booking.cancel(reason=reason)

        logger.info(f"Cancelled booking {booking.booking_number}")

        publish_booking_cancelled(booking, self.publisher)
        self._dispatch_cascade(booking)

        return booking

    def _dispatch_cascade(self, booking: Booking):
        """Hand the freed interval to the waitlist. Never affects the booking."""
        try:
            if getattr(settings, 'WAITLIST_CASCADE_ASYNC', True):
                from apps.core.tasks import process_waitlist_cascade

                process_waitlist_cascade.delay(
                    str(booking.court_id),
                    booking.start_time.isoformat(),
                    booking.end_time.isoformat(),
                    booking_id=str(booking.id),
                )
            else:
                from .waitlist_service import WaitlistService

                WaitlistService(
                    lock_manager=self.lock_manager,
                    publisher=self.publisher,
                ).on_cancellation(
                    booking.court_id, booking.start_time, booking.end_time,
                    booking_id=booking.id,
                )
        except Exception:
            logger.exception(
                f"Waitlist cascade failed for booking {booking.booking_number}"
            )

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_booking(self, booking_id: uuid.UUID) -> Booking:
        """Get a booking by ID."""
        from . import BookingNotFoundError

        booking_id = validate_id(booking_id, 'booking_id')

        try:
            return Booking.objects.get(id=booking_id)
        except Booking.DoesNotExist:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

    def list_user_bookings(
        self,
        requester_id: uuid.UUID,
        status: Optional[str] = None
    ) -> List[Booking]:
        """List a requester's bookings, oldest first."""
        from . import BookingValidationError

        requester_id = validate_id(requester_id, 'requester_id')
        queryset = Booking.objects.filter(requester_id=requester_id)

        if status:
            if status not in Booking.Status.values:
                raise BookingValidationError(f"Unknown booking status: {status}")
            queryset = queryset.filter(status=status)

        return list(queryset.order_by('start_time', 'created_at'))
