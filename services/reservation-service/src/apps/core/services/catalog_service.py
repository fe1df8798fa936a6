# services/reservation-service/src/apps/core/services/catalog_service.py
"""
Catalog Service

Builds immutable, versioned snapshots of the resource catalog and the active
pricing rules. A snapshot is loaded fresh for every engine operation and is
never cached across calls.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from apps.core.models import Court, Equipment, Coach, PricingRule

logger = logging.getLogger(__name__)

EMPTY_VERSION = 'empty'


@dataclass(frozen=True)
class CourtRecord:
    id: uuid.UUID
    name: str
    court_type: str
    base_price: Decimal
    is_active: bool


@dataclass(frozen=True)
class EquipmentRecord:
    id: uuid.UUID
    equipment_type: str
    total_stock: int
    rental_price: Decimal
    is_active: bool


@dataclass(frozen=True)
class AvailabilityWindow:
    day_of_week: int
    start_time: time
    end_time: time


@dataclass(frozen=True)
class CoachRecord:
    id: uuid.UUID
    name: str
    hourly_rate: Decimal
    is_active: bool
    windows: Tuple[AvailabilityWindow, ...] = ()


@dataclass(frozen=True)
class PricingRuleRecord:
    id: uuid.UUID
    name: str
    rule_type: str
    modifier_type: str
    modifier_value: Decimal
    evaluation_order: int
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    days_of_week: Tuple[int, ...] = ()
    applies_to: str = PricingRule.AppliesTo.ALL
    specific_dates: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogSnapshot:
    """Read-only view of the catalog used by a single operation."""

    version: str = EMPTY_VERSION
    courts: Dict[uuid.UUID, CourtRecord] = field(default_factory=dict)
    equipment: Dict[str, EquipmentRecord] = field(default_factory=dict)
    coaches: Dict[uuid.UUID, CoachRecord] = field(default_factory=dict)
    rules: Tuple[PricingRuleRecord, ...] = ()

    def court(self, court_id) -> Optional[CourtRecord]:
        return self.courts.get(court_id)

    def coach(self, coach_id) -> Optional[CoachRecord]:
        if coach_id is None:
            return None
        return self.coaches.get(coach_id)

    def equipment_for(self, equipment_type: str) -> Optional[EquipmentRecord]:
        return self.equipment.get(equipment_type)


class CatalogService:
    """
    Service for reading the resource catalog.

    Handles:
    - Court / coach lookup by id
    - Authoritative equipment record per type
    - Active pricing rules in evaluation order
    """

    def load_snapshot(
        self,
        court_ids: Iterable[uuid.UUID] = (),
        coach_ids: Iterable[uuid.UUID] = (),
    ) -> CatalogSnapshot:
        """Load a snapshot holding the requested courts and coaches."""
        court_ids = [c for c in court_ids if c]
        coach_ids = [c for c in coach_ids if c]
        stamps = []

        courts = {}
        for court in Court.objects.filter(id__in=court_ids):
            courts[court.id] = CourtRecord(
                id=court.id,
                name=court.name,
                court_type=court.court_type,
                base_price=court.base_price,
                is_active=court.is_active,
            )
            stamps.append(court.updated_at)

        coaches = {}
        coach_qs = Coach.objects.filter(id__in=coach_ids).prefetch_related(
            'availability_windows'
        )
        for coach in coach_qs:
            windows = tuple(
                AvailabilityWindow(
                    day_of_week=w.day_of_week,
                    start_time=w.start_time,
                    end_time=w.end_time,
                )
                for w in coach.availability_windows.all()
            )
            coaches[coach.id] = CoachRecord(
                id=coach.id,
                name=coach.name,
                hourly_rate=coach.hourly_rate,
                is_active=coach.is_active,
                windows=windows,
            )
            stamps.append(coach.updated_at)

        # First active record per type is authoritative
        equipment = {}
        for item in Equipment.objects.filter(is_active=True).order_by('created_at', 'id'):
            if item.equipment_type in equipment:
                continue
            equipment[item.equipment_type] = EquipmentRecord(
                id=item.id,
                equipment_type=item.equipment_type,
                total_stock=item.total_stock,
                rental_price=item.rental_price,
                is_active=item.is_active,
            )
            stamps.append(item.updated_at)

        rules = []
        for rule in PricingRule.objects.filter(is_active=True).order_by(
            'evaluation_order', 'created_at', 'id'
        ):
            rules.append(PricingRuleRecord(
                id=rule.id,
                name=rule.name,
                rule_type=rule.rule_type,
                modifier_type=rule.modifier_type,
                modifier_value=rule.modifier_value,
                evaluation_order=rule.evaluation_order,
                start_time=rule.start_time,
                end_time=rule.end_time,
                days_of_week=tuple(rule.days_of_week or ()),
                applies_to=rule.applies_to,
                specific_dates=tuple(str(d) for d in (rule.specific_dates or ())),
            ))
            stamps.append(rule.updated_at)

        version = max(stamps).isoformat() if stamps else EMPTY_VERSION

        logger.debug(
            f"Loaded catalog snapshot {version}: {len(courts)} courts, "
            f"{len(equipment)} equipment types, {len(coaches)} coaches, "
            f"{len(rules)} rules"
        )

        return CatalogSnapshot(
            version=version,
            courts=courts,
            equipment=equipment,
            coaches=coaches,
            rules=tuple(rules),
        )
