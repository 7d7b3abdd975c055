# services/booking-service/src/apps/api/serializers/review_serializers.py
"""
Review and Provider Stats Serializers
"""

from rest_framework import serializers

from apps.core.models import ProviderStats, Review


class ReviewSerializer(serializers.ModelSerializer):
    """Review as returned by the API."""

    class Meta:
        model = Review
        fields = [
            'id', 'customer_id', 'provider_id', 'service_id', 'booking_id',
            'rating', 'comment', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    """Serializer for creating reviews."""

    customer_id = serializers.UUIDField(required=False)
    provider_id = serializers.UUIDField()
    service_id = serializers.UUIDField()
    booking_id = serializers.UUIDField(required=False, allow_null=True)
    rating = serializers.IntegerField(
        min_value=Review.MIN_RATING,
        max_value=Review.MAX_RATING
    )
    comment = serializers.CharField(required=False, allow_blank=True, default='')

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


class ReviewUpdateSerializer(serializers.Serializer):
    """Rating and comment are the only editable review fields."""

    rating = serializers.IntegerField(
        min_value=Review.MIN_RATING,
        max_value=Review.MAX_RATING,
        required=False
    )
    comment = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No updatable fields provided.")
        return attrs


class ProviderStatsSerializer(serializers.ModelSerializer):
    """Derived provider aggregates. Never writable through the API."""

    rating = serializers.DecimalField(max_digits=3, decimal_places=2, read_only=True)

    class Meta:
        model = ProviderStats
        fields = [
            'provider_id', 'rating', 'total_reviews', 'completed_bookings',
            'rating_updated_at', 'bookings_updated_at',
        ]
        read_only_fields = fields
