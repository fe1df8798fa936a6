"""
Shared Validators Module.

Common validation utilities used across all services.
"""
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.utils import timezone


# =============================================================================
# UUID VALIDATORS
# =============================================================================

def validate_uuid(value: Any, field_name: str = "value") -> UUID:
    """Validate and convert a value to UUID."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(f"Invalid UUID format for {field_name}")


def validate_optional_uuid(value: Any, field_name: str = "value") -> Optional[UUID]:
    """Like validate_uuid, but passes through None and empty strings."""
    if value is None or value == '':
        return None
    return validate_uuid(value, field_name)


# =============================================================================
# DATE/TIME VALIDATORS
# =============================================================================

def validate_aware_datetime(value: Any, field_name: str = "datetime") -> datetime:
    """Validate a datetime, making naive values aware in the current timezone."""
    if not isinstance(value, datetime):
        raise ValidationError(f"{field_name} must be a datetime")

    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def validate_interval(
    start_time: Any,
    end_time: Any,
    max_duration_hours: Optional[int] = None,
) -> tuple:
    """Validate a half-open [start, end) interval. Returns the aware pair."""
    start_time = validate_aware_datetime(start_time, "start")
    end_time = validate_aware_datetime(end_time, "end")

    if start_time >= end_time:
        raise ValidationError("Start time must be before end time")

    if max_duration_hours is not None:
        if end_time - start_time > timedelta(hours=max_duration_hours):
            raise ValidationError(f"Duration cannot exceed {max_duration_hours} hours")

    return start_time, end_time


# =============================================================================
# NUMERIC VALIDATORS
# =============================================================================

def validate_non_negative_int(value: Any, field_name: str = "value") -> int:
    """Validate a non-negative integer count."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number != value and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be an integer")
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number
