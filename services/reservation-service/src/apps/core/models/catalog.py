# services/reservation-service/src/apps/core/models/catalog.py
"""
Resource Catalog Models

Courts, rental equipment and coaches. The catalog is managed by another
service; the reservation engine only reads it through catalog snapshots.
"""

from datetime import datetime
from decimal import Decimal

from django.db import models

from shared.common.mixins import CatalogRecord


class Court(CatalogRecord):
    """A bookable court."""

    class CourtType(models.TextChoices):
        INDOOR = 'indoor', 'Indoor'
        OUTDOOR = 'outdoor', 'Outdoor'

    name = models.CharField(max_length=120)
    court_type = models.CharField(max_length=20, choices=CourtType.choices)
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('10.00'),
        help_text="Price per hour before pricing rules"
    )

    class Meta:
        db_table = 'catalog_courts'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.get_court_type_display()})"


class Equipment(CatalogRecord):
    """A pool of identical rental units (e.g. all rackets)."""

    class EquipmentType(models.TextChoices):
        RACKET = 'racket', 'Racket'
        SHOE = 'shoe', 'Shoes'

    name = models.CharField(max_length=120)
    equipment_type = models.CharField(max_length=20, choices=EquipmentType.choices, db_index=True)
    total_stock = models.PositiveIntegerField(default=0)
    rental_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('5.00'),
        help_text="Price per unit per hour"
    )

    class Meta:
        db_table = 'catalog_equipment'
        ordering = ['equipment_type', 'created_at']
        verbose_name_plural = 'equipment'

    def __str__(self):
        return f"{self.name}: {self.total_stock} x {self.equipment_type}"


class Coach(CatalogRecord):
    """A coach bookable alongside a court."""

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('20.00')
    )

    class Meta:
        db_table = 'catalog_coaches'
        ordering = ['name']
        verbose_name_plural = 'coaches'

    def __str__(self):
        return self.name


class CoachAvailabilityWindow(models.Model):
    """
    Weekly recurring window in which a coach accepts bookings.

    Windows are single-day: start_time < end_time on the same day.
    """

    class DayOfWeek(models.IntegerChoices):
        SUNDAY = 0, 'Sunday'
        MONDAY = 1, 'Monday'
        TUESDAY = 2, 'Tuesday'
        WEDNESDAY = 3, 'Wednesday'
        THURSDAY = 4, 'Thursday'
        FRIDAY = 5, 'Friday'
        SATURDAY = 6, 'Saturday'

    coach = models.ForeignKey(
        Coach,
        on_delete=models.CASCADE,
        related_name='availability_windows'
    )
    day_of_week = models.IntegerField(choices=DayOfWeek.choices)
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        db_table = 'catalog_coach_availability'
        ordering = ['day_of_week', 'start_time']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='valid_coach_window'
            ),
        ]

    def __str__(self):
        return f"{self.get_day_of_week_display()}: {self.start_time} - {self.end_time}"

    @staticmethod
    def day_of_week_for(value: datetime) -> int:
        """Day of week with 0 = Sunday."""
        return (value.weekday() + 1) % 7
