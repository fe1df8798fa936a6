"""Django configuration for the reservation service.

Importing the Celery application here makes shared tasks register as soon
as Django starts.
"""

from .celery import app as celery_app  # noqa: F401

__all__ = ['celery_app']
