# services/reservation-service/src/tests/unit/test_availability.py
"""
Unit Tests for Availability Service
"""

import uuid
from datetime import date, datetime, timedelta, timezone as dt_timezone

import pytest
from django.test import override_settings

from apps.core.models import Booking, Equipment
from apps.core.services import AvailabilityService, BookingValidationError, CatalogService


def book(court_id, start, end, **kwargs):
    return Booking.objects.create(
        requester_id=uuid.uuid4(),
        court_id=court_id,
        start_time=start,
        end_time=end,
        **kwargs
    )


@pytest.mark.django_db
class TestCourtAvailability:
    """Tests for court checks."""

    def setup_method(self):
        self.service = AvailabilityService()

    def test_free_court(self, court, saturday_evening):
        start, end = saturday_evening
        assert self.service.court_available(court.id, start, end) is True

    def test_overlapping_booking_blocks(self, court, saturday_evening):
        start, end = saturday_evening
        book(court.id, start + timedelta(minutes=30), end + timedelta(minutes=30))

        assert self.service.court_available(court.id, start, end) is False

    def test_touching_booking_does_not_block(self, court, saturday_evening):
        start, end = saturday_evening
        book(court.id, end, end + timedelta(hours=1))
        book(court.id, start - timedelta(hours=1), start)

        assert self.service.court_available(court.id, start, end) is True

    def test_cancelled_booking_does_not_block(self, court, saturday_evening):
        start, end = saturday_evening
        book(court.id, start, end).cancel()

        assert self.service.court_available(court.id, start, end) is True

    def test_exclude_booking_id(self, court, saturday_evening):
        start, end = saturday_evening
        booking = book(court.id, start, end)

        assert self.service.court_available(
            court.id, start, end, exclude_booking_id=booking.id
        ) is True

    def test_missing_court_fails_closed(self, saturday_evening):
        start, end = saturday_evening
        assert self.service.court_available(uuid.uuid4(), start, end) is False

    def test_inactive_court_fails_closed(self, make_court, saturday_evening):
        start, end = saturday_evening
        closed = make_court(is_active=False)

        assert self.service.court_available(closed.id, start, end) is False


@pytest.mark.django_db
class TestEquipmentAvailability:
    """Tests for equipment stock checks."""

    def setup_method(self):
        self.service = AvailabilityService()

    def test_zero_quantity_always_available(self, saturday_evening):
        start, end = saturday_evening
        assert self.service.equipment_available(
            Equipment.EquipmentType.RACKET, 0, start, end
        ) is True

    def test_missing_equipment_unavailable(self, saturday_evening):
        start, end = saturday_evening
        assert self.service.equipment_available(
            Equipment.EquipmentType.SHOE, 1, start, end
        ) is False

    def test_inactive_equipment_unavailable(self, make_equipment, saturday_evening):
        start, end = saturday_evening
        make_equipment(Equipment.EquipmentType.RACKET, is_active=False)

        assert self.service.equipment_available(
            Equipment.EquipmentType.RACKET, 1, start, end
        ) is False

    def test_stock_counts_overlapping_bookings(self, court, outdoor_court, rackets, saturday_evening):
        start, end = saturday_evening
        book(court.id, start, end, racket_count=2)
        book(outdoor_court.id, start, end, racket_count=1)

        assert self.service.equipment_available(
            Equipment.EquipmentType.RACKET, 1, start, end
        ) is True
        assert self.service.equipment_available(
            Equipment.EquipmentType.RACKET, 2, start, end
        ) is False

    def test_non_overlapping_bookings_ignored(self, court, rackets, saturday_evening):
        start, end = saturday_evening
        book(court.id, end, end + timedelta(hours=1), racket_count=4)

        assert self.service.equipment_available(
            Equipment.EquipmentType.RACKET, 4, start, end
        ) is True

    def test_sum_is_conservative(self, court, outdoor_court, rackets, saturday_evening):
        """Two bookings that never overlap each other still count together."""
        start, end = saturday_evening
        half = start + timedelta(minutes=30)
        book(court.id, start, half, racket_count=2)
        book(outdoor_court.id, half, end, racket_count=2)

        assert self.service.equipment_available(
            Equipment.EquipmentType.RACKET, 1, start, end
        ) is False


@pytest.mark.django_db
class TestCoachAvailability:
    """Tests for coach schedule checks."""

    def setup_method(self):
        self.service = AvailabilityService()

    def test_inside_window(self, coach, saturday_evening):
        start, end = saturday_evening
        assert self.service.coach_available(coach.id, start, end) is True

    def test_window_edges_inclusive(self, coach):
        start = datetime(2026, 10, 24, 9, 0, tzinfo=dt_timezone.utc)
        end = datetime(2026, 10, 24, 21, 0, tzinfo=dt_timezone.utc)

        assert self.service.coach_available(coach.id, start, end) is True

    def test_outside_window(self, coach):
        start = datetime(2026, 10, 24, 20, 30, tzinfo=dt_timezone.utc)
        end = start + timedelta(hours=1)

        assert self.service.coach_available(coach.id, start, end) is False

    def test_wrong_day(self, coach):
        # Tuesday
        start = datetime(2026, 10, 20, 10, 0, tzinfo=dt_timezone.utc)

        assert self.service.coach_available(coach.id, start, start + timedelta(hours=1)) is False

    def test_crossing_midnight_unavailable(self, make_coach):
        from datetime import time
        night_owl = make_coach(windows=[
            (6, time(0, 0), time(23, 59)),
            (0, time(0, 0), time(23, 59)),
        ])
        start = datetime(2026, 10, 24, 23, 30, tzinfo=dt_timezone.utc)

        assert self.service.coach_available(
            night_owl.id, start, start + timedelta(hours=1)
        ) is False

    def test_ending_at_midnight(self, make_coach):
        from datetime import time
        late = make_coach(windows=[(6, time(18, 0), time(23, 59))])
        early = make_coach(windows=[(6, time(18, 0), time(23, 0))])
        start = datetime(2026, 10, 24, 23, 0, tzinfo=dt_timezone.utc)
        end = datetime(2026, 10, 25, 0, 0, tzinfo=dt_timezone.utc)

        assert self.service.coach_available(late.id, start, end) is True
        assert self.service.coach_available(early.id, start, end) is False

    def test_double_booked_coach(self, court, coach, saturday_evening):
        start, end = saturday_evening
        book(court.id, start, end, coach_id=coach.id)

        assert self.service.coach_available(coach.id, start, end) is False

    def test_inactive_coach(self, make_coach, saturday_evening):
        from datetime import time
        start, end = saturday_evening
        retired = make_coach(is_active=False, windows=[(6, time(9, 0), time(21, 0))])

        assert self.service.coach_available(retired.id, start, end) is False

    @override_settings(TIME_ZONE='Europe/Oslo')
    def test_windows_use_local_time(self, coach):
        # 19:30 UTC is 21:30 in Oslo (CEST), outside the 09:00-21:00 window
        start = datetime(2026, 10, 24, 19, 30, tzinfo=dt_timezone.utc)

        assert self.service.coach_available(coach.id, start, start + timedelta(minutes=30)) is False


@pytest.mark.django_db
class TestCheckAll:
    """Tests for the composite short-circuit check."""

    def setup_method(self):
        self.service = AvailabilityService()

    def test_reversed_interval_rejected(self, court, saturday_evening):
        start, end = saturday_evening

        with pytest.raises(BookingValidationError):
            self.service.check_all(court.id, end, start)

    def test_invalid_court_id_rejected(self, saturday_evening):
        start, end = saturday_evening

        with pytest.raises(BookingValidationError):
            self.service.check_all('court-1', start, end)

    def test_everything_available(self, court, rackets, shoes, coach, saturday_evening):
        start, end = saturday_evening
        result = self.service.check_all(court.id, start, end, rackets=1, shoes=1, coach_id=coach.id)

        assert result.to_dict() == {
            'court': True,
            'equipment': {'rackets': True, 'shoes': True},
            'coach': True,
            'all_available': True,
            'attempted': ['court', 'rackets', 'shoes', 'coach'],
            'skipped': [],
        }

    def test_no_extras_trivially_available(self, court, saturday_evening):
        start, end = saturday_evening
        result = self.service.check_all(court.id, start, end)

        assert result.all_available is True
        assert result.rackets is True
        assert result.shoes is True
        assert result.coach is True

    def test_court_conflict_skips_rest(self, court, rackets, coach, saturday_evening):
        start, end = saturday_evening
        book(court.id, start, end)

        result = self.service.check_all(court.id, start, end, rackets=1, coach_id=coach.id)

        assert result.to_dict() == {
            'court': False,
            'equipment': {'rackets': False, 'shoes': False},
            'coach': None,
            'all_available': False,
            'attempted': ['court'],
            'skipped': ['rackets', 'shoes', 'coach'],
        }

    def test_shoe_shortage_skips_coach(self, court, rackets, shoes, coach, saturday_evening):
        start, end = saturday_evening
        result = self.service.check_all(court.id, start, end, rackets=1, shoes=3, coach_id=coach.id)

        assert result.court is True
        assert result.rackets is True
        assert result.shoes is False
        assert result.coach is None
        assert result.skipped == ['coach']

    def test_uses_given_snapshot(self, court, saturday_evening):
        start, end = saturday_evening
        snapshot = CatalogService().load_snapshot()

        # The snapshot holds no courts, so the court is treated as missing
        result = self.service.check_all(court.id, start, end, snapshot=snapshot)

        assert result.court is False


@pytest.mark.django_db
class TestAvailableSlots:
    """Tests for slot finding."""

    def setup_method(self):
        self.service = AvailabilityService()

    def test_default_hourly_slots(self, court):
        slots = self.service.get_available_slots(court.id, date(2026, 10, 24))

        assert len(slots) == 13
        assert slots[0]['start'] == '2026-10-24T09:00:00+00:00'
        assert slots[-1]['end'] == '2026-10-24T22:00:00+00:00'
        assert all(slot['available'] for slot in slots)

    def test_booked_slot_flagged(self, court, saturday_evening):
        start, end = saturday_evening
        book(court.id, start, end)

        slots = self.service.get_available_slots(court.id, date(2026, 10, 24))
        unavailable = [slot['start'] for slot in slots if not slot['available']]

        assert unavailable == ['2026-10-24T18:00:00+00:00']

    def test_unknown_court_has_no_slots(self):
        assert self.service.get_available_slots(uuid.uuid4(), date(2026, 10, 24)) == []
