# services/reservation-service/src/apps/core/services/__init__.py
"""
Reservation Service Business Logic
"""

from .catalog_service import CatalogService, CatalogSnapshot
from .availability_service import AvailabilityService, AvailabilityResult
from .pricing_service import PricingService, PriceBreakdown
from .lock_manager import (
    LocalLockManager,
    CacheLockManager,
    get_lock_manager,
    resource_keys,
)
from .booking_service import BookingService
from .waitlist_service import WaitlistService


# Custom Exceptions
class BookingServiceError(Exception):
    """Base exception for booking service errors."""
    pass


class BookingNotFoundError(BookingServiceError):
    """Booking (or quoted court) not found."""
    pass


class BookingConflictError(BookingServiceError):
    """Booking conflicts with existing reservation or state."""

    def __init__(self, message: str, availability: 'AvailabilityResult' = None):
        super().__init__(message)
        self.availability = availability


class BookingValidationError(BookingServiceError):
    """Booking validation failed."""
    pass


class TransientInfrastructureError(BookingServiceError):
    """Lock or database failure. Safe to retry."""
    pass


class LockTimeoutError(TransientInfrastructureError):
    """Resource locks could not be acquired in time."""
    pass


class WaitlistError(BookingServiceError):
    """Waitlist operation error."""
    pass


__all__ = [
    # Services
    'CatalogService',
    'CatalogSnapshot',
    'AvailabilityService',
    'AvailabilityResult',
    'PricingService',
    'PriceBreakdown',
    'LocalLockManager',
    'CacheLockManager',
    'get_lock_manager',
    'resource_keys',
    'BookingService',
    'WaitlistService',

    # Exceptions
    'BookingServiceError',
    'BookingNotFoundError',
    'BookingConflictError',
    'BookingValidationError',
    'TransientInfrastructureError',
    'LockTimeoutError',
    'WaitlistError',
]
