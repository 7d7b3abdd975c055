# services/booking-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers

Input validation and response shapes for booking operations.
"""

from decimal import Decimal
from rest_framework import serializers

from apps.core.models import Booking


class StatusField(serializers.ChoiceField):
    """Booking status accepting any casing ("COMPLETED", "in-progress")."""

    def __init__(self, **kwargs):
        kwargs.setdefault('choices', Booking.Status.choices)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        try:
            data = Booking.normalize_status(data)
        except ValueError:
            self.fail('invalid_choice', input=data)
        return super().to_internal_value(data)


class PricingSerializer(serializers.Serializer):
    """Pricing snapshot taken when the booking is made."""

    base_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, min_value=Decimal('0')
    )
    discount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, min_value=Decimal('0')
    )
    tax = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, min_value=Decimal('0')
    )
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False, default='USD')

    def validate_total_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Total amount must be positive")
        return value

    def to_internal_value(self, data):
        validated = super().to_internal_value(data)
        # Stored as JSON; keep decimals exact
        return {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in validated.items()
        }


class BookingSerializer(serializers.ModelSerializer):
    """Booking with party summaries attached."""

    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    payment_status_display = serializers.CharField(
        source='get_payment_status_display',
        read_only=True
    )
    customer = serializers.SerializerMethodField()
    provider = serializers.SerializerMethodField()
    service = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            'id', 'booking_number',
            'customer_id', 'provider_id', 'service_id',
            'customer', 'provider', 'service',
            'scheduled_date', 'scheduled_time',
            'customer_address_id', 'payment_method_id',
            'pricing', 'payment_status', 'payment_status_display',
            'status', 'status_display',
            'special_instructions',
            'completed_at', 'cancelled_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def _party(self, obj, kind):
        directory = self.context.get('party_directory')
        if directory is None:
            return None
        return getattr(directory, f'resolve_{kind}')(getattr(obj, f'{kind}_id'))

    def get_customer(self, obj):
        return self._party(obj, 'customer')

    def get_provider(self, obj):
        return self._party(obj, 'provider')

    def get_service(self, obj):
        return self._party(obj, 'service')


class BookingListSerializer(BookingSerializer):
    """Serializer for booking lists."""

    class Meta(BookingSerializer.Meta):
        fields = [
            'id', 'booking_number',
            'customer_id', 'provider_id', 'service_id',
            'customer', 'provider', 'service',
            'scheduled_date', 'scheduled_time',
            'pricing', 'payment_status',
            'status', 'status_display',
            'completed_at', 'created_at',
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    """Serializer for creating new bookings."""

    customer_id = serializers.UUIDField(
        required=False,
        help_text="Defaults to the authenticated customer"
    )
    provider_id = serializers.UUIDField()
    service_id = serializers.UUIDField()
    scheduled_date = serializers.DateField()
    scheduled_time = serializers.CharField(max_length=20)
    customer_address_id = serializers.UUIDField()
    payment_method_id = serializers.UUIDField()
    pricing = PricingSerializer()
    special_instructions = serializers.CharField(
        required=False,
        allow_blank=True,
        default=''
    )

    def validate_scheduled_time(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Time slot is required")
        return value

    def validate(self, attrs):
        if not attrs.get('customer_id'):
            request = self.context.get('request')
            user = getattr(request, 'user', None)
            if getattr(user, 'role', None) == 'customer' and user.id:
                attrs['customer_id'] = user.id
            else:
                raise serializers.ValidationError({
                    'customer_id': "This field is required."
                })
        return attrs


class BookingUpdateSerializer(serializers.Serializer):
    """
    Field-mask update. Only keys sent by the caller end up in
    validated_data, so absent fields are never overwritten.
    """

    scheduled_date = serializers.DateField(required=False)
    scheduled_time = serializers.CharField(max_length=20, required=False)
    customer_address_id = serializers.UUIDField(required=False)
    payment_method_id = serializers.UUIDField(required=False)
    payment_status = serializers.ChoiceField(
        choices=Booking.PaymentStatus.choices,
        required=False
    )
    pricing = PricingSerializer(required=False)
    special_instructions = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if 'status' in self.initial_data:
            raise serializers.ValidationError({
                'status': "Use the status endpoint to change a booking's status."
            })

        unknown = sorted(set(self.initial_data) - set(self.fields))
        if unknown:
            raise serializers.ValidationError({
                field: "This field cannot be updated." for field in unknown
            })

        if not attrs:
            raise serializers.ValidationError("No updatable fields provided.")
        return attrs


class BookingStatusSerializer(serializers.Serializer):
    """Serializer for lifecycle transitions."""

    status = StatusField()


class AvailabilityQuerySerializer(serializers.Serializer):
    """Query parameters of the slot availability check."""

    provider_id = serializers.UUIDField()
    date = serializers.DateField()
    slot = serializers.CharField(max_length=20, required=False)
    exclude_booking_id = serializers.UUIDField(required=False)
