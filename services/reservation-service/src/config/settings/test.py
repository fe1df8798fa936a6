# services/reservation-service/src/config/settings/test.py
"""
Test Settings

Django settings for running tests.
"""

import tempfile
from pathlib import Path

from .base import *

# Test mode
DEBUG = False
TESTING = True
TIME_ZONE = 'UTC'

# File-backed SQLite so that threads in concurrency tests share one database
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'OPTIONS': {'timeout': 20},
        'TEST': {
            'NAME': str(Path(tempfile.gettempdir()) / 'reservation_service_test.sqlite3'),
        },
    }
}

# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None

MIGRATION_MODULES = DisableMigrations()

# Use local memory cache
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
}

# Celery runs tasks inline
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'

# Event backend for testing
EVENT_BACKEND = 'memory'

# In-process locks, short timeout
BOOKING_LOCK_BACKEND = 'local'
BOOKING_LOCK_TIMEOUT = 2.0

WAITLIST_CASCADE_ASYNC = False

# Logging - minimal output during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
        'apps': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
    },
}
