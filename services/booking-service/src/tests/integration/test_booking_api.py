# services/booking-service/src/tests/integration/test_booking_api.py
"""
Integration Tests for Booking API

Tests API endpoints with full request/response cycle.
"""

import importlib
import uuid
from unittest.mock import patch

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.models import Booking
from apps.core.services import BookingService
from shared.common.authentication import generate_access_token

BOOKINGS_URL = '/api/v1/bookings/'


def status_url(booking_id):
    return f'{BOOKINGS_URL}{booking_id}/status/'


@pytest.mark.django_db
class TestBookingAPI:
    """Integration tests for booking endpoints."""

    def test_create_booking(self, api_client, sample_booking_data, customer_id):
        response = api_client.post(BOOKINGS_URL, data=sample_booking_data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'pending'
        assert response.data['booking_number'].startswith('AME')
        assert response.data['customer'] == {'id': str(customer_id)}
        assert response.data['pricing']['total_amount'] == '108.00'

    def test_customer_defaults_to_caller(self, api_client, sample_booking_data, customer_id):
        data = dict(sample_booking_data)
        del data['customer_id']

        response = api_client.post(BOOKINGS_URL, data=data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['customer_id'] == str(customer_id)

    def test_slot_conflict(self, api_client, sample_booking_data):
        first = api_client.post(BOOKINGS_URL, data=sample_booking_data, format='json')

        data = dict(sample_booking_data, customer_id=uuid.uuid4())
        response = api_client.post(BOOKINGS_URL, data=data, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['success'] is False
        assert response.data['error']['code'] == 'SLOT_CONFLICT'
        assert response.data['error']['details']['scheduled_time'] == '09:00-11:00'
        assert response.data['error']['details']['held_by'] == first.data['booking_number']

    def test_create_validation_error(self, api_client, sample_booking_data):
        pricing = dict(sample_booking_data['pricing'], total_amount='0')
        data = dict(sample_booking_data, pricing=pricing)

        response = api_client.post(BOOKINGS_URL, data=data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'VALIDATION_ERROR'

    def test_get_booking(self, api_client, create_booking):
        booking = create_booking()

        response = api_client.get(f'{BOOKINGS_URL}{booking.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(booking.id)
        assert response.data['provider'] == {'id': str(booking.provider_id)}

    @pytest.mark.parametrize('booking_id', [uuid.uuid4(), 'not-a-uuid'])
    def test_get_missing_booking(self, api_client, booking_id):
        response = api_client.get(f'{BOOKINGS_URL}{booking_id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_patch_updates_only_given_fields(self, api_client, create_booking):
        booking = create_booking(special_instructions='Gate code 1234')

        response = api_client.patch(
            f'{BOOKINGS_URL}{booking.id}/', data={'payment_status': 'paid'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['payment_status'] == 'paid'
        assert response.data['special_instructions'] == 'Gate code 1234'

    def test_patch_rejects_status(self, api_client, create_booking):
        booking = create_booking()

        response = api_client.patch(
            f'{BOOKINGS_URL}{booking.id}/', data={'status': 'completed'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        booking.refresh_from_db()
        assert booking.status == Booking.Status.PENDING

    def test_put_is_not_allowed(self, api_client, create_booking):
        booking = create_booking()

        response = api_client.put(f'{BOOKINGS_URL}{booking.id}/', data={}, format='json')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED

    def test_delete_booking(self, api_client, create_booking):
        booking = create_booking()

        response = api_client.delete(f'{BOOKINGS_URL}{booking.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Booking.objects.filter(id=booking.id).exists()


@pytest.mark.django_db
class TestBookingStatusAPI:
    """Integration tests for lifecycle transitions."""

    def test_transition(self, api_client, create_booking):
        booking = create_booking()

        response = api_client.patch(status_url(booking.id), data={'status': 'ACCEPTED'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'accepted'

    def test_illegal_transition(self, api_client, create_booking):
        booking = create_booking()

        response = api_client.patch(status_url(booking.id), data={'status': 'completed'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'ILLEGAL_TRANSITION'
        assert response.data['error']['details'] == {
            'current_state': 'pending',
            'target_state': 'completed',
        }

    def test_unknown_status(self, api_client, create_booking):
        booking = create_booking()

        response = api_client.patch(status_url(booking.id), data={'status': 'archived'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_completion_shows_in_provider_stats(self, api_client, create_booking, provider_id):
        booking = create_booking(status=Booking.Status.IN_PROGRESS)

        api_client.patch(status_url(booking.id), data={'status': 'completed'}, format='json')
        response = api_client.get(f'/api/v1/providers/{provider_id}/stats/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['completed_bookings'] == 1


@pytest.mark.django_db
class TestBookingListAPI:
    """Integration tests for listings and the list envelope."""

    @pytest.fixture
    def twelve_bookings(self, create_booking):
        return [create_booking(scheduled_time=f'slot-{index:02d}') for index in range(12)]

    def test_list_by_provider_pages(self, api_client, twelve_bookings, provider_id):
        response = api_client.get(
            f'{BOOKINGS_URL}provider/{provider_id}/', {'page': 2, 'page_size': 10}
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['items']) == 2
        assert response.data['total'] == 12
        assert response.data['page'] == 2
        assert response.data['pageSize'] == 10
        assert response.data['totalPages'] == 2

    def test_page_past_the_end(self, api_client, twelve_bookings, customer_id):
        response = api_client.get(
            f'{BOOKINGS_URL}customer/{customer_id}/', {'page': 5, 'limit': 10}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['items'] == []
        assert response.data['total'] == 12

    def test_invalid_page(self, api_client):
        response = api_client.get(BOOKINGS_URL, {'page': 0})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_status_filter(self, api_client, create_booking, service_id):
        create_booking()
        create_booking(scheduled_time='late', status=Booking.Status.CANCELLED)

        response = api_client.get(
            f'{BOOKINGS_URL}service/{service_id}/', {'status': 'Cancelled'}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 1
        assert response.data['items'][0]['status'] == 'cancelled'

    def test_availability(self, api_client, create_booking, provider_id, booking_day):
        create_booking()

        response = api_client.get(f'{BOOKINGS_URL}availability/', {
            'provider_id': str(provider_id),
            'date': booking_day.isoformat(),
            'slot': '09:00-11:00',
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booked_slots'] == ['09:00-11:00']
        assert response.data['available'] is False


@pytest.mark.django_db
class TestAuthentication:
    def test_anonymous_request_rejected(self):
        response = APIClient().get(BOOKINGS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['success'] is False

    def test_bearer_token(self, sample_booking_data, customer_id):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {generate_access_token(customer_id)}')
        data = dict(sample_booking_data)
        del data['customer_id']

        response = client.post(BOOKINGS_URL, data=data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['customer_id'] == str(customer_id)

    def test_invalid_token(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION='Bearer not.a.token')

        response = client.get(BOOKINGS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_service_token(self):
        client = APIClient()
        client.credentials(HTTP_X_SERVICE_AUTH='test-service-token', HTTP_X_SOURCE_SERVICE='review-service')

        response = client.get(BOOKINGS_URL)

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestHealth:
    def test_health(self):
        response = APIClient().get('/health/')
        assert response.status_code == status.HTTP_200_OK

    def test_ready(self):
        response = APIClient().get('/ready/')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'healthy'


@pytest.mark.django_db
class TestUnexpectedErrors:
    def test_internal_text_is_hidden(self, api_client, create_booking):
        booking = create_booking()

        with patch.object(
            BookingService, 'get_booking',
            side_effect=RuntimeError('relation "bookings" does not exist')
        ):
            response = api_client.get(f'{BOOKINGS_URL}{booking.id}/')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['error']['code'] == 'INTERNAL_ERROR'
        assert 'bookings' not in response.data['error']['message']
        assert 'traceback' not in response.data['error']

    def test_debug_is_off_unless_requested(self, monkeypatch):
        from config.settings import base

        monkeypatch.delenv('DEBUG', raising=False)
        importlib.reload(base)

        assert base.DEBUG is False
