# services/reservation-service/src/apps/core/serializers.py
"""
Reservation Service Serializers

Input validation for engine payloads and output representation of bookings
and waitlist entries.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Booking, WaitlistEntry


class ResourceSelectionSerializer(serializers.Serializer):
    """Court plus optional rental equipment and coach."""

    court_id = serializers.UUIDField()
    rackets = serializers.IntegerField(min_value=0, required=False, default=0)
    shoes = serializers.IntegerField(min_value=0, required=False, default=0)
    coach_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class IntervalSerializer(serializers.Serializer):
    """Half-open [start, end) interval."""

    start = serializers.DateTimeField()
    end = serializers.DateTimeField()

    def validate(self, data):
        if data['start'] >= data['end']:
            raise serializers.ValidationError("Start time must be before end time")
        return data


class SlotQuerySerializer(serializers.Serializer):
    court_id = serializers.UUIDField()
    date = serializers.DateField()
    duration_minutes = serializers.IntegerField(min_value=15, max_value=720, default=60)


class BookingSerializer(serializers.ModelSerializer):
    """Booking representation returned by the engine."""

    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    duration_hours = serializers.SerializerMethodField()
    total = serializers.DecimalField(
        source='total_price',
        max_digits=10,
        decimal_places=2,
        read_only=True
    )

    class Meta:
        model = Booking
        fields = [
            'id', 'booking_number', 'requester_id',
            'court_id', 'start_time', 'end_time', 'duration_hours',
            'racket_count', 'shoe_count', 'coach_id',
            'status', 'status_display',
            'base_price', 'court_price', 'equipment_price', 'coach_price',
            'applied_rules', 'total', 'catalog_version',
            'cancelled_at', 'cancellation_reason',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_duration_hours(self, obj) -> str:
        return str(obj.duration_hours.quantize(Decimal('0.01')))


class WaitlistEntrySerializer(serializers.ModelSerializer):
    """Waitlist entry representation returned by the engine."""

    class Meta:
        model = WaitlistEntry
        fields = [
            'id', 'requester_id', 'court_id',
            'preferred_start', 'preferred_end',
            'racket_count', 'shoe_count', 'coach_id',
            'position', 'notified', 'notified_at', 'notified_for_booking_id',
            'created_at',
        ]
        read_only_fields = fields
