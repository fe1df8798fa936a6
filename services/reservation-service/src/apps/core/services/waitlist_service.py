# services/reservation-service/src/apps/core/services/waitlist_service.py
"""
Waitlist Service

Manages the court waitlist and the cascade that runs when a cancellation
frees an interval.
"""

import uuid
import logging
from datetime import datetime
from typing import Optional, List

from django.db.models import Max

from apps.core.events import (
    EventPublisher,
    event_publisher,
    publish_waitlist_entry_created,
    publish_waitlist_entry_notified,
)
from apps.core.models import WaitlistEntry
from .lock_manager import get_lock_manager, locked_transaction, waitlist_key
from .validation import validate_id, validate_resource_request

logger = logging.getLogger(__name__)


class WaitlistService:
    """
    Service for managing waitlist.

    Handles:
    - Joining with overlap-scoped positions
    - Cancellation cascade
    - Entry lookup
    """

    def __init__(self, lock_manager=None, publisher: EventPublisher = None):
        self.lock_manager = lock_manager or get_lock_manager()
        self.publisher = publisher or event_publisher

    # ==========================================================================
    # Queue
    # ==========================================================================

    def join(
        self,
        requester_id: uuid.UUID,
        court_id: uuid.UUID,
        start: datetime,
        end: datetime,
        rackets: int = 0,
        shoes: int = 0,
        coach_id: uuid.UUID = None
    ) -> WaitlistEntry:
        """Queue a request behind every overlapping entry on the court."""
        requester_id = validate_id(requester_id, 'requester_id')
        request = validate_resource_request(court_id, start, end, rackets, shoes, coach_id)

        with locked_transaction(self.lock_manager, [waitlist_key(request.court_id)]):
            last_position = WaitlistEntry.overlapping(
                request.court_id, request.start, request.end
            ).aggregate(last=Max('position'))['last'] or 0

            entry = WaitlistEntry.objects.create(
                requester_id=requester_id,
                court_id=request.court_id,
                preferred_start=request.start,
                preferred_end=request.end,
                racket_count=request.rackets,
                shoe_count=request.shoes,
                coach_id=request.coach_id,
                position=last_position + 1,
            )

        logger.info(
            f"Added waitlist entry #{entry.position} for requester {requester_id} "
            f"on court {entry.court_id}"
        )

        publish_waitlist_entry_created(entry, self.publisher)

        return entry

    def on_cancellation(
        self,
        court_id: uuid.UUID,
        start: datetime,
        end: datetime,
        booking_id: uuid.UUID = None
    ) -> Optional[WaitlistEntry]:
        """
        Notify the first waiting entry overlapping a freed interval.

        Only the entry with the smallest position (earliest join on ties) is
        marked notified. No booking is created.

        When booking_id is given, a cancellation is handled once: a repeated
        call returns the entry already notified for that booking.
        """
        court_id = validate_id(court_id, 'court_id')
        if booking_id is not None:
            booking_id = validate_id(booking_id, 'booking_id')

        with locked_transaction(self.lock_manager, [waitlist_key(court_id)]):
            if booking_id is not None:
                handled = WaitlistEntry.objects.filter(
                    notified_for_booking_id=booking_id
                ).first()
                if handled is not None:
                    logger.info(
                        f"Cancellation of booking {booking_id} already notified "
                        f"waitlist entry {handled.id}"
                    )
                    return handled

            entry = (
                WaitlistEntry.overlapping(court_id, start, end)
                .filter(notified=False)
                .select_for_update()
                .order_by('position', 'created_at', 'id')
                .first()
            )

            if entry is not None:
                entry.mark_notified(booking_id=booking_id)

        if entry is None:
            logger.debug(f"No waitlist entry to notify on court {court_id}")
            return None

        logger.info(
            f"Notified waitlist entry #{entry.position} ({entry.id}) "
            f"on court {court_id}"
        )

        publish_waitlist_entry_notified(entry, self.publisher)

        return entry

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_entry(self, entry_id: uuid.UUID) -> WaitlistEntry:
        """Get a waitlist entry by ID."""
        from . import WaitlistError

        entry_id = validate_id(entry_id, 'entry_id')

        try:
            return WaitlistEntry.objects.get(id=entry_id)
        except WaitlistEntry.DoesNotExist:
            raise WaitlistError(f"Waitlist entry {entry_id} not found")

    def list_entries(
        self,
        court_id: uuid.UUID,
        start: datetime = None,
        end: datetime = None,
        waiting_only: bool = False
    ) -> List[WaitlistEntry]:
        """List entries for a court, optionally limited to an interval."""
        court_id = validate_id(court_id, 'court_id')

        if start is not None and end is not None:
            queryset = WaitlistEntry.overlapping(court_id, start, end)
        else:
            queryset = WaitlistEntry.objects.filter(court_id=court_id)

        if waiting_only:
            queryset = queryset.filter(notified=False)

        return list(queryset.order_by('preferred_start', 'position', 'created_at'))
