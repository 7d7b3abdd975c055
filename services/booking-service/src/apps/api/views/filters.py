# services/booking-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for booking API query parameters.
"""

import django_filters

from apps.core.models import Booking, Review


class BookingFilter(django_filters.FilterSet):
    """
    Filter for booking queries.

    Status values are case-normalized before validation.
    """

    status = django_filters.ChoiceFilter(
        choices=Booking.Status.choices
    )
    payment_status = django_filters.ChoiceFilter(
        choices=Booking.PaymentStatus.choices
    )

    # Party filters
    customer_id = django_filters.UUIDFilter()
    provider_id = django_filters.UUIDFilter()
    service_id = django_filters.UUIDFilter()

    # Schedule
    scheduled_date = django_filters.DateFilter()

    class Meta:
        model = Booking
        fields = [
            'status', 'payment_status',
            'customer_id', 'provider_id', 'service_id',
            'scheduled_date',
        ]

    def __init__(self, data=None, *args, **kwargs):
        if data is not None and data.get('status'):
            data = data.copy()
            try:
                data['status'] = Booking.normalize_status(data['status'])
            except ValueError:
                pass  # left as-is so the choice filter reports it
        super().__init__(data, *args, **kwargs)

    def get_filters_dict(self) -> dict:
        """Cleaned filter values the caller actually supplied."""
        return {
            name: value
            for name, value in self.form.cleaned_data.items()
            if value not in (None, '')
        }


class ReviewFilter(django_filters.FilterSet):
    """Filter for review queries."""

    provider_id = django_filters.UUIDFilter()
    customer_id = django_filters.UUIDFilter()
    service_id = django_filters.UUIDFilter()
    min_rating = django_filters.NumberFilter(
        field_name='rating',
        lookup_expr='gte'
    )

    class Meta:
        model = Review
        fields = ['provider_id', 'customer_id', 'service_id', 'min_rating']
