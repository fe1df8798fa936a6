# services/reservation-service/src/apps/core/services/pricing_service.py
"""
Pricing Service

Computes price breakdowns from a catalog snapshot. Rules stack in their
evaluation order and only affect the court price.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone as dt_timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any, List

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.models import Equipment, PricingRule
from apps.core.models.catalog import CoachAvailabilityWindow
from .catalog_service import (
    CatalogService,
    CatalogSnapshot,
    CourtRecord,
    PricingRuleRecord,
)
from .validation import validate_resource_request

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
HUNDRED = Decimal('100')
SECONDS_PER_HOUR = Decimal('3600')

# Saturday and Sunday, with 0 = Sunday
DEFAULT_WEEKEND_DAYS = (6, 0)


def money(value: Decimal) -> Decimal:
    """Round half-up to cents."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def duration_hours(start: datetime, end: datetime) -> Decimal:
    return Decimal((end - start).total_seconds()) / SECONDS_PER_HOUR


def _holiday_date(value) -> Optional[date]:
    """
    UTC calendar date of a stored holiday entry.

    Entries are ISO dates or timestamps; timestamps with an offset are
    converted to UTC first, naive ones are read as UTC.
    """
    text = str(value)
    try:
        parsed = parse_date(text)
        if parsed is not None:
            return parsed

        moment = parse_datetime(text)
    except ValueError:
        moment = None

    if moment is None:
        logger.warning(f"Ignoring unreadable holiday date {value!r}")
        return None

    if timezone.is_naive(moment):
        return moment.date()
    return moment.astimezone(dt_timezone.utc).date()


@dataclass
class AppliedRule:
    name: str
    modifier_kind: str
    value: Decimal
    amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'modifier_kind': self.modifier_kind,
            'value': str(self.value),
            'amount': str(money(self.amount)),
        }


@dataclass
class PriceBreakdown:
    """Unrounded price components; rounding happens in to_dict()."""

    base_price: Decimal
    court_price: Decimal
    equipment_price: Decimal
    coach_price: Decimal
    applied_rules: List[AppliedRule] = field(default_factory=list)
    catalog_version: str = ''

    @property
    def total(self) -> Decimal:
        return self.court_price + self.equipment_price + self.coach_price

    def rounded(self) -> Dict[str, Decimal]:
        return {
            'base_price': money(self.base_price),
            'court_price': money(self.court_price),
            'equipment_price': money(self.equipment_price),
            'coach_price': money(self.coach_price),
            'total': money(self.total),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = {key: str(value) for key, value in self.rounded().items()}
        data['applied_rules'] = [rule.to_dict() for rule in self.applied_rules]
        data['catalog_version'] = self.catalog_version
        return data


class PricingService:
    """
    Service for price calculation.

    Handles:
    - Rule predicates (peak hour, weekend, court type, holiday, custom)
    - Modifier composition on the court price
    - Equipment and coach pricing
    """

    def __init__(self, catalog: CatalogService = None):
        self.catalog = catalog or CatalogService()

    def quote(
        self,
        court_id: uuid.UUID,
        start: datetime,
        end: datetime,
        rackets: int = 0,
        shoes: int = 0,
        coach_id: uuid.UUID = None
    ) -> PriceBreakdown:
        """Load a fresh snapshot and price the selection. No side effects."""
        request = validate_resource_request(court_id, start, end, rackets, shoes, coach_id)

        snapshot = self.catalog.load_snapshot(
            court_ids=[request.court_id],
            coach_ids=[request.coach_id] if request.coach_id else [],
        )
        return self.calculate(
            snapshot, request.court_id, request.start, request.end,
            request.rackets, request.shoes, request.coach_id,
        )

    def calculate(
        self,
        snapshot: CatalogSnapshot,
        court_id: uuid.UUID,
        start: datetime,
        end: datetime,
        rackets: int = 0,
        shoes: int = 0,
        coach_id: uuid.UUID = None
    ) -> PriceBreakdown:
        """Price a selection against a snapshot."""
        from . import BookingNotFoundError

        court = snapshot.court(court_id)
        if court is None or not court.is_active:
            raise BookingNotFoundError(f"Court {court_id} not found")

        hours = duration_hours(start, end)
        running = court.base_price * hours
        applied = []

        for rule in snapshot.rules:
            if not self._rule_applies(rule, court, start):
                continue
            running, amount = self._apply_modifier(rule, running)
            applied.append(AppliedRule(
                name=rule.name,
                modifier_kind=rule.modifier_type,
                value=rule.modifier_value,
                amount=amount,
            ))

        equipment_price = Decimal('0')
        for equipment_type, count in (
            (Equipment.EquipmentType.RACKET, rackets),
            (Equipment.EquipmentType.SHOE, shoes),
        ):
            if not count:
                continue
            item = snapshot.equipment_for(equipment_type)
            if item is None:
                continue
            equipment_price += item.rental_price * count * hours

        coach_price = Decimal('0')
        coach = snapshot.coach(coach_id)
        if coach is not None:
            coach_price = coach.hourly_rate * hours

        return PriceBreakdown(
            base_price=court.base_price,
            court_price=running,
            equipment_price=equipment_price,
            coach_price=coach_price,
            applied_rules=applied,
            catalog_version=snapshot.version,
        )

    # ==========================================================================
    # Rules
    # ==========================================================================

    def _rule_applies(
        self,
        rule: PricingRuleRecord,
        court: CourtRecord,
        start: datetime
    ) -> bool:
        """Test a rule predicate against the booking start."""
        rule_type = rule.rule_type

        if rule_type == PricingRule.RuleType.PEAK_HOUR:
            return self._in_peak_window(rule.start_time, rule.end_time, timezone.localtime(start).time())

        if rule_type == PricingRule.RuleType.WEEKEND:
            days = rule.days_of_week or DEFAULT_WEEKEND_DAYS
            return CoachAvailabilityWindow.day_of_week_for(timezone.localtime(start)) in days

        if rule_type == PricingRule.RuleType.INDOOR_PREMIUM:
            return rule.applies_to in (PricingRule.AppliesTo.ALL, court.court_type)

        if rule_type == PricingRule.RuleType.HOLIDAY:
            utc_date = start.astimezone(dt_timezone.utc).date()
            return any(_holiday_date(d) == utc_date for d in rule.specific_dates)

        if rule_type == PricingRule.RuleType.CUSTOM:
            return True

        logger.warning(f"Unknown pricing rule type {rule_type} on rule {rule.id}")
        return False

    @staticmethod
    def _in_peak_window(
        window_start: Optional[time],
        window_end: Optional[time],
        clock: time
    ) -> bool:
        """[start, end), wrapping past midnight when start >= end."""
        if window_start is None or window_end is None:
            return False
        if window_start < window_end:
            return window_start <= clock < window_end
        return clock >= window_start or clock < window_end

    @staticmethod
    def _apply_modifier(rule: PricingRuleRecord, running: Decimal):
        """Return (new running price, applied amount)."""
        value = rule.modifier_value
        modifier = rule.modifier_type

        if modifier == PricingRule.ModifierType.MULTIPLIER:
            amount = running * (value - 1)
            return running * value, amount

        if modifier == PricingRule.ModifierType.FIXED_ADD:
            return running + value, value

        if modifier == PricingRule.ModifierType.FIXED_SUBTRACT:
            return running - value, -value

        if modifier == PricingRule.ModifierType.PERCENTAGE:
            amount = running * value / HUNDRED
            return running + amount, amount

        logger.warning(f"Unknown modifier type {modifier} on rule {rule.id}")
        return running, Decimal('0')
