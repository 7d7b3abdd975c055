# services/booking-service/src/apps/api/views/booking_views.py
"""
Booking API Views

Bookings: create, read, field-mask update, lifecycle transitions, delete
and listing by customer, provider or service.
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.models import Booking
from apps.core.services import (
    AvailabilityService,
    BookingNotFoundError,
    BookingService,
    NotFoundError,
    PartyDirectory,
)
from apps.api.serializers import (
    AvailabilityQuerySerializer,
    BookingCreateSerializer,
    BookingListSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    BookingUpdateSerializer,
)
from shared.common.pagination import StandardPagination
from .base import ServiceExceptionMixin, parse_uuid
from .filters import BookingFilter

logger = logging.getLogger(__name__)


class BookingViewSet(ServiceExceptionMixin, viewsets.GenericViewSet):
    """
    ViewSet for booking management.

    All writes go through BookingService; PUT is not offered because
    updates are field masks.
    """

    queryset = Booking.objects.all()
    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardPagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()
        self.availability_service = AvailabilityService()
        self.party_directory = PartyDirectory()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['party_directory'] = self.party_directory
        return context

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action in ['list', 'by_customer', 'by_provider', 'by_service']:
            return BookingListSerializer
        elif self.action == 'create':
            return BookingCreateSerializer
        elif self.action == 'partial_update':
            return BookingUpdateSerializer
        elif self.action == 'set_status':
            return BookingStatusSerializer
        return BookingSerializer

    def _respond(self, booking, status_code=status.HTTP_200_OK):
        serializer = BookingSerializer(booking, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    def _paged_list(self, request, filters):
        """Run a listing through the service and wrap it in the list envelope."""
        page, page_size = self.paginator.get_page_params(request)
        items, total = self.booking_service.list_bookings(filters, page, page_size)
        serializer = BookingListSerializer(
            items, many=True, context=self.get_serializer_context()
        )
        return StandardPagination.build_response(serializer.data, total, page, page_size)

    def _query_filters(self, request, **fixed):
        filterset = BookingFilter(request.query_params, queryset=Booking.objects.all())
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        filters = filterset.get_filters_dict()
        filters.update(fixed)
        return filters

    # ==========================================================================
    # CRUD
    # ==========================================================================

    def list(self, request, *args, **kwargs):
        """List bookings filtered by status, customer, provider or service."""
        return self._paged_list(request, self._query_filters(request))

    def create(self, request, *args, **kwargs):
        """Create a new booking."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.booking_service.create_booking(**serializer.validated_data)
        return self._respond(booking, status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None, *args, **kwargs):
        """Get a booking with party summaries."""
        booking = self.booking_service.get_booking(parse_uuid(pk, BookingNotFoundError))
        return self._respond(booking)

    def partial_update(self, request, pk=None, *args, **kwargs):
        """Update only the fields present in the request body."""
        booking_id = parse_uuid(pk, BookingNotFoundError)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.booking_service.update_booking(
            booking_id, dict(serializer.validated_data)
        )
        return self._respond(booking)

    def destroy(self, request, pk=None, *args, **kwargs):
        """Hard delete a booking."""
        self.booking_service.delete_booking(parse_uuid(pk, BookingNotFoundError))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    @action(detail=True, methods=['patch'], url_path='status')
    def set_status(self, request, pk=None):
        """Move a booking to its next lifecycle status."""
        booking_id = parse_uuid(pk, BookingNotFoundError)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.booking_service.transition_status(
            booking_id, serializer.validated_data['status']
        )
        return self._respond(booking)

    # ==========================================================================
    # Listing by party
    # ==========================================================================

    @action(detail=False, methods=['get'], url_path=r'customer/(?P<customer_id>[^/.]+)')
    def by_customer(self, request, customer_id=None):
        """Bookings of a customer, newest first."""
        filters = self._query_filters(request, customer_id=parse_uuid(customer_id, NotFoundError))
        return self._paged_list(request, filters)

    @action(detail=False, methods=['get'], url_path=r'provider/(?P<provider_id>[^/.]+)')
    def by_provider(self, request, provider_id=None):
        """Bookings of a provider, optionally narrowed by status."""
        filters = self._query_filters(request, provider_id=parse_uuid(provider_id, NotFoundError))
        return self._paged_list(request, filters)

    @action(detail=False, methods=['get'], url_path=r'service/(?P<service_id>[^/.]+)')
    def by_service(self, request, service_id=None):
        """Bookings of a service."""
        filters = self._query_filters(request, service_id=parse_uuid(service_id, NotFoundError))
        return self._paged_list(request, filters)

    # ==========================================================================
    # Availability
    # ==========================================================================

    @action(detail=False, methods=['get'])
    def availability(self, request):
        """
        Check a provider slot, or list the slots taken on a date when no
        slot is given.
        """
        serializer = AvailabilityQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        provider_id = params['provider_id']
        scheduled_date = params['date']
        booked = self.availability_service.get_booked_slots(provider_id, scheduled_date)

        data = {
            'provider_id': str(provider_id),
            'date': scheduled_date.isoformat(),
            'booked_slots': booked,
        }

        if params.get('slot'):
            data['slot'] = params['slot']
            data['available'] = self.availability_service.is_slot_available(
                provider_id,
                scheduled_date,
                params['slot'],
                exclude_booking_id=params.get('exclude_booking_id'),
            )

        return Response(data)
