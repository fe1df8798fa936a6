# services/reservation-service/src/apps/core/models/waitlist.py
"""
Waitlist Model

Deferred court requests, notified in position order when a slot frees up.
"""

import uuid

from django.db import models
from django.utils import timezone

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class WaitlistEntry(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Waitlist entry for a preferred court interval.

    Positions are scoped to the group of entries on the same court whose
    preferred intervals overlap.
    """

    # Requester
    requester_id = models.UUIDField(db_index=True)

    # Request Details
    court_id = models.UUIDField(db_index=True)
    preferred_start = models.DateTimeField()
    preferred_end = models.DateTimeField()
    racket_count = models.PositiveIntegerField(default=0)
    shoe_count = models.PositiveIntegerField(default=0)
    coach_id = models.UUIDField(blank=True, null=True)

    # Queue
    position = models.PositiveIntegerField()
    notified = models.BooleanField(default=False, db_index=True)
    notified_at = models.DateTimeField(blank=True, null=True)
    notified_for_booking_id = models.UUIDField(blank=True, null=True, db_index=True)

    class Meta:
        db_table = 'waitlist_entries'
        ordering = ['court_id', 'preferred_start', 'position']
        indexes = [
            models.Index(fields=['court_id', 'preferred_start', 'position']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(preferred_end__gt=models.F('preferred_start')),
                name='valid_waitlist_interval'
            ),
        ]
        verbose_name_plural = 'waitlist entries'

    def __str__(self):
        return f"#{self.position} for court {self.court_id} at {self.preferred_start}"

    def mark_notified(self, booking_id: uuid.UUID = None):
        """
        Mark the entry as notified. Notification is one-way.

        booking_id records the cancellation that freed the slot.
        """
        if self.notified:
            raise ValueError("Waitlist entry already notified")

        self.notified = True
        self.notified_at = timezone.now()
        self.notified_for_booking_id = booking_id
        self.save(update_fields=[
            'notified', 'notified_at', 'notified_for_booking_id', 'updated_at'
        ])

    @classmethod
    def overlapping(cls, court_id: uuid.UUID, start, end):
        """Entries for the court whose preferred interval overlaps [start, end)."""
        return cls.objects.filter(
            court_id=court_id,
            preferred_start__lt=end,
            preferred_end__gt=start,
        )
