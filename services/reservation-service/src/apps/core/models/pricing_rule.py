# services/reservation-service/src/apps/core/models/pricing_rule.py
"""
Pricing Rule Model

Stackable predicate-plus-modifier rules applied to the court price.
"""

from django.db import models

from shared.common.mixins import CatalogRecord


class PricingRule(CatalogRecord):
    """
    A pricing rule.

    Active rules are evaluated in ascending ``evaluation_order``. Multiplier
    and percentage modifiers compound on the running court price, so the
    order is part of the rule definition.
    """

    class RuleType(models.TextChoices):
        PEAK_HOUR = 'peak_hour', 'Peak Hour'
        WEEKEND = 'weekend', 'Weekend'
        INDOOR_PREMIUM = 'indoor_premium', 'Indoor Premium'
        HOLIDAY = 'holiday', 'Holiday'
        CUSTOM = 'custom', 'Custom'

    class ModifierType(models.TextChoices):
        MULTIPLIER = 'multiplier', 'Multiplier'
        FIXED_ADD = 'fixed_add', 'Fixed Add'
        FIXED_SUBTRACT = 'fixed_subtract', 'Fixed Subtract'
        PERCENTAGE = 'percentage', 'Percentage'

    class AppliesTo(models.TextChoices):
        ALL = 'all', 'All Courts'
        INDOOR = 'indoor', 'Indoor Courts'
        OUTDOOR = 'outdoor', 'Outdoor Courts'

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    rule_type = models.CharField(max_length=30, choices=RuleType.choices)

    # ==========================================================================
    # Predicate Parameters
    # ==========================================================================

    start_time = models.TimeField(
        blank=True,
        null=True,
        help_text="Peak window start (peak_hour)"
    )
    end_time = models.TimeField(
        blank=True,
        null=True,
        help_text="Peak window end, earlier than start for windows crossing midnight"
    )
    days_of_week = models.JSONField(
        default=list,
        blank=True,
        help_text="Days with 0 = Sunday (weekend); empty means Saturday and Sunday"
    )
    applies_to = models.CharField(
        max_length=20,
        choices=AppliesTo.choices,
        default=AppliesTo.ALL,
        help_text="Court type scope (indoor_premium)"
    )
    specific_dates = models.JSONField(
        default=list,
        blank=True,
        help_text="ISO dates, compared against the UTC start date (holiday)"
    )

    # ==========================================================================
    # Modifier
    # ==========================================================================

    modifier_type = models.CharField(max_length=20, choices=ModifierType.choices)
    modifier_value = models.DecimalField(max_digits=10, decimal_places=4)

    evaluation_order = models.IntegerField(
        default=0,
        db_index=True,
        help_text="Rules are applied in ascending order"
    )

    class Meta:
        db_table = 'pricing_rules'
        ordering = ['evaluation_order', 'created_at', 'id']
        indexes = [
            models.Index(fields=['is_active', 'evaluation_order']),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_rule_type_display()})"
