# services/reservation-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for reservation service tests.
"""

import uuid
from datetime import datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from apps.core.events import clear_published_events, published_events


@pytest.fixture(autouse=True)
def events():
    """Captured events of the in-memory backend."""
    clear_published_events()
    yield published_events
    clear_published_events()


@pytest.fixture
def requester_id():
    """Provide a test requester ID."""
    return uuid.uuid4()


@pytest.fixture
def other_requester_id():
    return uuid.uuid4()


@pytest.fixture
def saturday_evening():
    """Saturday 2026-10-24 18:00-19:00 UTC."""
    start = datetime(2026, 10, 24, 18, 0, tzinfo=dt_timezone.utc)
    return start, start + timedelta(hours=1)


@pytest.fixture
def monday_morning():
    """Monday 2026-10-19 10:00-11:00 UTC."""
    start = datetime(2026, 10, 19, 10, 0, tzinfo=dt_timezone.utc)
    return start, start + timedelta(hours=1)


# =============================================================================
# Catalog Factories
# =============================================================================

@pytest.fixture
def make_court():
    from apps.core.models import Court

    def factory(**kwargs):
        defaults = {
            'name': 'Center Court',
            'court_type': Court.CourtType.INDOOR,
            'base_price': Decimal('15.00'),
        }
        defaults.update(kwargs)
        return Court.objects.create(**defaults)

    return factory


@pytest.fixture
def make_equipment():
    from apps.core.models import Equipment

    def factory(equipment_type=Equipment.EquipmentType.RACKET, **kwargs):
        defaults = {
            'name': f"Rental {equipment_type}",
            'equipment_type': equipment_type,
            'total_stock': 4,
            'rental_price': Decimal('5.00'),
        }
        defaults.update(kwargs)
        return Equipment.objects.create(**defaults)

    return factory


@pytest.fixture
def make_coach():
    from apps.core.models import Coach, CoachAvailabilityWindow

    def factory(windows=None, **kwargs):
        defaults = {
            'name': 'Alex Coach',
            'hourly_rate': Decimal('25.00'),
        }
        defaults.update(kwargs)
        coach = Coach.objects.create(**defaults)
        for day_of_week, start, end in windows or []:
            CoachAvailabilityWindow.objects.create(
                coach=coach,
                day_of_week=day_of_week,
                start_time=start,
                end_time=end,
            )
        return coach

    return factory


@pytest.fixture
def make_rule():
    from apps.core.models import PricingRule

    def factory(**kwargs):
        defaults = {
            'name': 'Custom',
            'rule_type': PricingRule.RuleType.CUSTOM,
            'modifier_type': PricingRule.ModifierType.FIXED_ADD,
            'modifier_value': Decimal('1'),
        }
        defaults.update(kwargs)
        return PricingRule.objects.create(**defaults)

    return factory


# =============================================================================
# Catalog Records
# =============================================================================

@pytest.fixture
def court(make_court):
    """Indoor court at 15/hr."""
    return make_court()


@pytest.fixture
def outdoor_court(make_court):
    from apps.core.models import Court
    return make_court(name='Garden Court', court_type=Court.CourtType.OUTDOOR, base_price=Decimal('10.00'))


@pytest.fixture
def rackets(make_equipment):
    """Four rackets at 5/hr."""
    from apps.core.models import Equipment
    return make_equipment(Equipment.EquipmentType.RACKET, total_stock=4, rental_price=Decimal('5.00'))


@pytest.fixture
def shoes(make_equipment):
    """Two pairs of shoes at 3/hr."""
    from apps.core.models import Equipment
    return make_equipment(Equipment.EquipmentType.SHOE, total_stock=2, rental_price=Decimal('3.00'))


@pytest.fixture
def coach(make_coach):
    """Coach at 25/hr, working Saturdays 09:00-21:00 and Mondays 08:00-12:00."""
    return make_coach(windows=[
        (6, time(9, 0), time(21, 0)),
        (1, time(8, 0), time(12, 0)),
    ])


@pytest.fixture
def weekend_and_indoor_rules(make_rule):
    """Weekend x1.3 evaluated before an indoor +5 premium."""
    from apps.core.models import PricingRule

    weekend = make_rule(
        name='Weekend',
        rule_type=PricingRule.RuleType.WEEKEND,
        days_of_week=[0, 6],
        modifier_type=PricingRule.ModifierType.MULTIPLIER,
        modifier_value=Decimal('1.3'),
        evaluation_order=10,
    )
    indoor = make_rule(
        name='Indoor Premium',
        rule_type=PricingRule.RuleType.INDOOR_PREMIUM,
        applies_to=PricingRule.AppliesTo.INDOOR,
        modifier_type=PricingRule.ModifierType.FIXED_ADD,
        modifier_value=Decimal('5'),
        evaluation_order=20,
    )
    return weekend, indoor


@pytest.fixture
def lock_manager():
    from apps.core.services import LocalLockManager
    return LocalLockManager(timeout=1.0)


@pytest.fixture
def engine(lock_manager):
    from apps.core.engine import BookingEngine
    return BookingEngine(lock_manager=lock_manager)
