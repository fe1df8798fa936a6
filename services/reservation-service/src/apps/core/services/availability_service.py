# services/reservation-service/src/apps/core/services/availability_service.py
"""
Availability Service

Multi-resource availability checks for courts, rental equipment and coaches.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime, date, time, timedelta
from typing import Optional, Dict, Any, List

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from apps.core.models import Booking, Equipment
from apps.core.models.catalog import CoachAvailabilityWindow
from .catalog_service import CatalogService, CatalogSnapshot
from .validation import validate_resource_request

logger = logging.getLogger(__name__)

# Latest clock a window can end on; it stands for 24:00
END_OF_DAY = time(23, 59)

EQUIPMENT_COUNT_FIELDS = {
    Equipment.EquipmentType.RACKET: 'racket_count',
    Equipment.EquipmentType.SHOE: 'shoe_count',
}


@dataclass
class AvailabilityResult:
    """
    Composite availability of a resource selection.

    Checks run court, rackets, shoes, coach and stop at the first
    unavailable resource. Skipped equipment checks stay False and a skipped
    coach check stays None.
    """

    court: bool = False
    rackets: bool = False
    shoes: bool = False
    coach: Optional[bool] = None
    all_available: bool = False
    attempted: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'court': self.court,
            'equipment': {
                'rackets': self.rackets,
                'shoes': self.shoes,
            },
            'coach': self.coach,
            'all_available': self.all_available,
            'attempted': list(self.attempted),
            'skipped': list(self.skipped),
        }


class AvailabilityService:
    """
    Service for availability checks.

    Handles:
    - Court, equipment and coach checks
    - Short-circuit composite check
    - Slot finding
    """

    CHECK_ORDER = ['court', 'rackets', 'shoes', 'coach']

    def __init__(self, catalog: CatalogService = None):
        self.catalog = catalog or CatalogService()

    # ==========================================================================
    # Single Resource Checks
    # ==========================================================================

    def court_available(
        self,
        court_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: uuid.UUID = None,
        snapshot: CatalogSnapshot = None
    ) -> bool:
        """Check the court exists, is active and has no overlapping booking."""
        if snapshot is None:
            snapshot = self.catalog.load_snapshot(court_ids=[court_id])

        court = snapshot.court(court_id)
        if court is None or not court.is_active:
            return False

        return not Booking.overlapping(
            start, end,
            court_id=court_id,
            exclude_booking_id=exclude_booking_id,
        ).exists()

    def equipment_available(
        self,
        equipment_type: str,
        quantity: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: uuid.UUID = None,
        snapshot: CatalogSnapshot = None
    ) -> bool:
        """
        Check enough units of an equipment type are free.

        Counts of every overlapping booking are summed, whether or not those
        bookings overlap each other.
        """
        if quantity == 0:
            return True

        if snapshot is None:
            snapshot = self.catalog.load_snapshot()

        equipment = snapshot.equipment_for(equipment_type)
        if equipment is None or not equipment.is_active:
            return False

        count_field = EQUIPMENT_COUNT_FIELDS[equipment_type]
        booked = Booking.overlapping(
            start, end,
            exclude_booking_id=exclude_booking_id,
        ).aggregate(total=Sum(count_field))['total'] or 0

        return equipment.total_stock - booked >= quantity

    def coach_available(
        self,
        coach_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: uuid.UUID = None,
        snapshot: CatalogSnapshot = None
    ) -> bool:
        """Check the coach works the whole interval and is not already booked."""
        if snapshot is None:
            snapshot = self.catalog.load_snapshot(coach_ids=[coach_id])

        coach = snapshot.coach(coach_id)
        if coach is None or not coach.is_active:
            return False

        local_start = timezone.localtime(start)
        local_end = timezone.localtime(end)

        day_of_week = CoachAvailabilityWindow.day_of_week_for(local_start)
        start_clock = local_start.time()
        end_clock = local_end.time()

        # Windows are single-day; ending at midnight closes the start day
        if local_end.date() != local_start.date():
            if end_clock != time(0) or local_end.date() != local_start.date() + timedelta(days=1):
                return False
            end_clock = END_OF_DAY

        in_window = any(
            w.day_of_week == day_of_week
            and w.start_time <= start_clock
            and end_clock <= w.end_time
            for w in coach.windows
        )
        if not in_window:
            return False

        return not Booking.overlapping(
            start, end,
            coach_id=coach_id,
            exclude_booking_id=exclude_booking_id,
        ).exists()

    # ==========================================================================
    # Composite Check
    # ==========================================================================

    def check_all(
        self,
        court_id: uuid.UUID,
        start: datetime,
        end: datetime,
        rackets: int = 0,
        shoes: int = 0,
        coach_id: uuid.UUID = None,
        exclude_booking_id: uuid.UUID = None,
        snapshot: CatalogSnapshot = None
    ) -> AvailabilityResult:
        """Check court, then rackets, then shoes, then coach."""
        request = validate_resource_request(court_id, start, end, rackets, shoes, coach_id)
        court_id, start, end = request.court_id, request.start, request.end
        rackets, shoes, coach_id = request.rackets, request.shoes, request.coach_id

        if snapshot is None:
            snapshot = self.catalog.load_snapshot(
                court_ids=[court_id],
                coach_ids=[coach_id] if coach_id else [],
            )

        result = AvailabilityResult()
        checks = [
            ('court', lambda: self.court_available(
                court_id, start, end, exclude_booking_id, snapshot)),
            ('rackets', lambda: self.equipment_available(
                Equipment.EquipmentType.RACKET, rackets, start, end,
                exclude_booking_id, snapshot)),
            ('shoes', lambda: self.equipment_available(
                Equipment.EquipmentType.SHOE, shoes, start, end,
                exclude_booking_id, snapshot)),
            ('coach', lambda: True if coach_id is None else self.coach_available(
                coach_id, start, end, exclude_booking_id, snapshot)),
        ]

        for index, (name, check) in enumerate(checks):
            available = check()
            setattr(result, name, available)
            result.attempted.append(name)
            if not available:
                result.skipped = [n for n, _ in checks[index + 1:]]
                logger.debug(
                    f"Court {court_id} {start.isoformat()}-{end.isoformat()}: "
                    f"{name} unavailable"
                )
                return result

        result.all_available = True
        return result

    # ==========================================================================
    # Slot Finding
    # ==========================================================================

    def get_available_slots(
        self,
        court_id: uuid.UUID,
        target_date: date,
        duration_minutes: int = 60
    ) -> List[Dict[str, Any]]:
        """List fixed-length slots on a date, flagged by court availability."""
        snapshot = self.catalog.load_snapshot(court_ids=[court_id])
        court = snapshot.court(court_id)
        if court is None or not court.is_active:
            return []

        open_time, close_time = self._get_opening_hours()
        slot_duration = timedelta(minutes=duration_minutes)

        current = timezone.make_aware(datetime.combine(target_date, open_time))
        day_end = timezone.make_aware(datetime.combine(target_date, close_time))

        blocked = list(
            Booking.overlapping(current, day_end, court_id=court_id)
            .values_list('start_time', 'end_time')
        )

        slots = []
        while current + slot_duration <= day_end:
            slot_end = current + slot_duration
            is_blocked = any(
                current < booked_end and slot_end > booked_start
                for booked_start, booked_end in blocked
            )
            slots.append({
                'start': current.isoformat(),
                'end': slot_end.isoformat(),
                'duration_minutes': duration_minutes,
                'available': not is_blocked,
            })
            current = slot_end

        return slots

    def _get_opening_hours(self):
        """Slot window from settings, as (open, close) clock times."""
        open_value = getattr(settings, 'BOOKING_SLOT_OPEN', '09:00')
        close_value = getattr(settings, 'BOOKING_SLOT_CLOSE', '22:00')
        return time.fromisoformat(open_value), time.fromisoformat(close_value)
