# services/reservation-service/src/apps/core/models/booking.py
"""
Booking Model

Confirmed allocations of a court, optional rental equipment and an optional
coach for a half-open [start, end) interval.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class Booking(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Booking model.

    A booking is created already confirmed. The only later mutation is the
    one-way transition to cancelled; bookings are never deleted.
    """

    class Status(models.TextChoices):
        CONFIRMED = 'confirmed', 'Confirmed'
        CANCELLED = 'cancelled', 'Cancelled'

    # Booking Number
    booking_number = models.CharField(max_length=20, unique=True, db_index=True)

    # Requester
    requester_id = models.UUIDField(db_index=True)

    # Resources
    court_id = models.UUIDField(db_index=True)
    racket_count = models.PositiveIntegerField(default=0)
    shoe_count = models.PositiveIntegerField(default=0)
    coach_id = models.UUIDField(blank=True, null=True, db_index=True)

    # Interval
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.CONFIRMED,
        db_index=True
    )

    # Pricing
    base_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    court_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    equipment_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    coach_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    applied_rules = models.JSONField(default=list, blank=True)
    catalog_version = models.CharField(max_length=64, blank=True, default='')

    # Cancellation
    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancellation_reason = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['court_id', 'start_time', 'end_time', 'status']),
            models.Index(fields=['coach_id', 'start_time', 'end_time', 'status']),
            models.Index(fields=['requester_id', 'start_time']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='valid_booking_interval'
            ),
        ]

    def __str__(self):
        return f"{self.booking_number}: {self.start_time.strftime('%Y-%m-%d %H:%M')}"

    def save(self, *args, **kwargs):
        if not self.booking_number:
            self.booking_number = self._generate_booking_number()
        super().save(*args, **kwargs)

    def _generate_booking_number(self) -> str:
        """Generate a unique booking number."""
        date_str = timezone.now().strftime('%Y%m%d')
        return f"BK-{date_str}-{uuid.uuid4().hex[:6].upper()}"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def duration_hours(self) -> Decimal:
        """Duration in (possibly fractional) hours."""
        seconds = Decimal((self.end_time - self.start_time).total_seconds())
        return seconds / Decimal('3600')

    @property
    def is_confirmed(self) -> bool:
        return self.status == self.Status.CONFIRMED

    @property
    def price_breakdown(self) -> dict:
        return {
            'base_price': self.base_price,
            'court_price': self.court_price,
            'equipment_price': self.equipment_price,
            'coach_price': self.coach_price,
            'applied_rules': self.applied_rules,
            'total': self.total_price,
            'catalog_version': self.catalog_version,
        }

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def cancel(self, reason: str = None):
        """Cancel the booking."""
        if not self.is_confirmed:
            raise ValueError(f"Cannot cancel booking in {self.status} status")

        self.status = self.Status.CANCELLED
        self.cancelled_at = timezone.now()
        self.cancellation_reason = reason
        self.save(update_fields=[
            'status', 'cancelled_at', 'cancellation_reason', 'updated_at'
        ])

    # ==========================================================================
    # Class Methods
    # ==========================================================================

    @classmethod
    def overlapping(
        cls,
        start,
        end,
        court_id: uuid.UUID = None,
        coach_id: uuid.UUID = None,
        exclude_booking_id: uuid.UUID = None
    ):
        """Confirmed bookings whose interval overlaps [start, end)."""
        queryset = cls.objects.filter(
            status=cls.Status.CONFIRMED,
            start_time__lt=end,
            end_time__gt=start,
        )

        if court_id:
            queryset = queryset.filter(court_id=court_id)

        if coach_id:
            queryset = queryset.filter(coach_id=coach_id)

        if exclude_booking_id:
            queryset = queryset.exclude(id=exclude_booking_id)

        return queryset
