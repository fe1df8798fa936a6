# services/reservation-service/src/apps/core/tasks.py
"""
Celery Tasks for Reservation Service
"""

import logging
from typing import Dict, Any

from celery import shared_task
from django.utils.dateparse import parse_datetime

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def process_waitlist_cascade(
    self,
    court_id: str,
    start: str,
    end: str,
    booking_id: str = None
) -> Dict[str, Any]:
    """
    Notify the next waitlist entry for a freed court interval.

    Args:
        court_id: UUID of the court
        start: ISO-8601 start of the freed interval
        end: ISO-8601 end of the freed interval
        booking_id: UUID of the cancelled booking; redelivery of the same
            cancellation notifies no further entries

    Returns:
        Dict with the notified entry, if any
    """
    from .services import WaitlistService, TransientInfrastructureError

    try:
        entry = WaitlistService().on_cancellation(
            court_id, parse_datetime(start), parse_datetime(end),
            booking_id=booking_id,
        )
    except TransientInfrastructureError as e:
        logger.warning(f"Waitlist cascade for court {court_id} failed, retrying: {e}")
        raise self.retry(exc=e)

    if entry is None:
        return {'success': True, 'notified': None}

    return {'success': True, 'notified': str(entry.id), 'position': entry.position}
