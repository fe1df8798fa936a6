"""Base settings for Reservation Service."""
import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(BASE_DIR.parent.parent.parent))

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DEBUG', 'True').lower() == 'true'
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'rest_framework',
    'apps.core',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'reservation_service_db'),
        'USER': os.environ.get('DB_USER', 'reservation_service_user'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'reservation_service_password'),
        'HOST': os.environ.get('DB_HOST', 'pgbouncer'),
        'PORT': os.environ.get('DB_PORT', '6432'),
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REDIS_URL = os.environ.get('REDIS_URL', 'redis://redis:6379/4')
CACHES = {'default': {'BACKEND': 'django_redis.cache.RedisCache', 'LOCATION': REDIS_URL}}
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', REDIS_URL)
CELERY_TASK_ACKS_LATE = True

# Event publishing: log | memory | redis | webhook
EVENT_PUBLISHING_ENABLED = os.environ.get('EVENT_PUBLISHING_ENABLED', 'True').lower() == 'true'
EVENT_BACKEND = os.environ.get('EVENT_BACKEND', 'log')
EVENT_WEBHOOK_URL = os.environ.get('EVENT_WEBHOOK_URL')
EVENT_REDIS_URL = os.environ.get('EVENT_REDIS_URL', REDIS_URL)

# Resource locking: local (threading, single process) | redis (django-redis cache.lock)
BOOKING_LOCK_BACKEND = os.environ.get('BOOKING_LOCK_BACKEND', 'redis')
BOOKING_LOCK_TIMEOUT = float(os.environ.get('BOOKING_LOCK_TIMEOUT', '5'))
BOOKING_LOCK_LEASE = int(os.environ.get('BOOKING_LOCK_LEASE', '30'))

# Run the waitlist cascade as a Celery task instead of inline after cancel
WAITLIST_CASCADE_ASYNC = os.environ.get('WAITLIST_CASCADE_ASYNC', 'True').lower() == 'true'

# Slot listing window (local clock, HH:MM)
BOOKING_SLOT_OPEN = os.environ.get('BOOKING_SLOT_OPEN', '09:00')
BOOKING_SLOT_CLOSE = os.environ.get('BOOKING_SLOT_CLOSE', '22:00')

SERVICE_NAME = 'reservation-service'
SERVICE_PORT = 8005

LOGGING = {'version': 1, 'disable_existing_loggers': False, 'formatters': {'json': {'()': 'pythonjsonlogger.jsonlogger.JsonFormatter'}}, 'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'json'}}, 'root': {'handlers': ['console'], 'level': 'INFO'}}
