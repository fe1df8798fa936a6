# services/reservation-service/src/apps/core/models/__init__.py
"""
Reservation Service Models
"""

from .catalog import Court, Equipment, Coach, CoachAvailabilityWindow
from .pricing_rule import PricingRule
from .booking import Booking
from .waitlist import WaitlistEntry

__all__ = [
    'Court',
    'Equipment',
    'Coach',
    'CoachAvailabilityWindow',
    'PricingRule',
    'Booking',
    'WaitlistEntry',
]
