# Shared Common Library for the Courtside platform.
# This package contains validators and model mixins used by every service.
# Model mixins live in shared.common.mixins and are imported from model modules
# only, after the Django app registry is ready.

__version__ = "1.0.0"

from .validators import (
    validate_uuid,
    validate_optional_uuid,
    validate_aware_datetime,
    validate_interval,
    validate_non_negative_int,
)

__all__ = [
    # Version
    '__version__',

    # Validators
    'validate_uuid',
    'validate_optional_uuid',
    'validate_aware_datetime',
    'validate_interval',
    'validate_non_negative_int',
]
