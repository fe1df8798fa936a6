# services/reservation-service/src/apps/core/services/validation.py
"""
Request validation for the reservation services.

Wraps the shared validators and reports failures as BookingValidationError.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.core.exceptions import ValidationError

from shared.common.validators import (
    validate_uuid,
    validate_optional_uuid,
    validate_interval,
    validate_non_negative_int,
)


@dataclass(frozen=True)
class ResourceRequest:
    """A validated court selection for one interval."""

    court_id: uuid.UUID
    start: datetime
    end: datetime
    rackets: int = 0
    shoes: int = 0
    coach_id: Optional[uuid.UUID] = None


def _translate(error: ValidationError):
    from . import BookingValidationError
    return BookingValidationError('; '.join(error.messages))


def validate_id(value, field_name: str) -> uuid.UUID:
    """Validate an identifier, raising BookingValidationError."""
    try:
        return validate_uuid(value, field_name)
    except ValidationError as e:
        raise _translate(e) from e


def validate_resource_request(
    court_id,
    start,
    end,
    rackets=0,
    shoes=0,
    coach_id=None
) -> ResourceRequest:
    """Validate a selection before any resource is touched."""
    try:
        start, end = validate_interval(start, end)
        return ResourceRequest(
            court_id=validate_uuid(court_id, 'court_id'),
            start=start,
            end=end,
            rackets=validate_non_negative_int(rackets, 'rackets'),
            shoes=validate_non_negative_int(shoes, 'shoes'),
            coach_id=validate_optional_uuid(coach_id, 'coach_id'),
        )
    except ValidationError as e:
        raise _translate(e) from e
