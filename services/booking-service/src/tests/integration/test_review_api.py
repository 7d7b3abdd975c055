# services/booking-service/src/tests/integration/test_review_api.py
"""
Integration Tests for Review and Provider Stats API
"""

import uuid
from unittest.mock import patch

import pytest
from rest_framework import status

from apps.core.models import Booking
from apps.core.services import AvailabilityService, TransientStorageError

REVIEWS_URL = '/api/v1/reviews/'


def stats_url(provider_id):
    return f'/api/v1/providers/{provider_id}/stats/'


@pytest.mark.django_db
class TestReviewAPI:
    """Integration tests for review endpoints."""

    def test_reviews_drive_provider_rating(self, api_client, provider_id):
        for rating in (5, 3, 4):
            response = api_client.post(REVIEWS_URL, data={
                'provider_id': str(provider_id),
                'service_id': str(uuid.uuid4()),
                'rating': rating,
            }, format='json')
            assert response.status_code == status.HTTP_201_CREATED

        response = api_client.get(stats_url(provider_id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['rating'] == '4.00'
        assert response.data['total_reviews'] == 3

    def test_duplicate_review(self, api_client, provider_id, service_id):
        data = {'provider_id': str(provider_id), 'service_id': str(service_id), 'rating': 5}
        api_client.post(REVIEWS_URL, data=data, format='json')

        response = api_client.post(REVIEWS_URL, data=dict(data, rating=2), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'DUPLICATE_REVIEW'

    def test_rating_out_of_range(self, api_client, provider_id, service_id):
        response = api_client.post(REVIEWS_URL, data={
            'provider_id': str(provider_id), 'service_id': str(service_id), 'rating': 6,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'VALIDATION_ERROR'

    def test_list_by_provider(self, api_client, create_review, provider_id):
        create_review(rating=4)
        create_review(rating=2)
        create_review(provider_id=uuid.uuid4(), rating=5)

        response = api_client.get(REVIEWS_URL, {'provider_id': str(provider_id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 2

    def test_delete_review_resets_rating(self, api_client, create_review, provider_id):
        review = create_review(rating=3)

        response = api_client.delete(f'{REVIEWS_URL}{review.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        stats = api_client.get(stats_url(provider_id)).data
        assert stats['rating'] == '0.00'
        assert stats['total_reviews'] == 0


@pytest.mark.django_db
class TestProviderStatsAPI:
    def test_unknown_provider_has_zero_stats(self, api_client):
        response = api_client.get(stats_url(uuid.uuid4()))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_reviews'] == 0
        assert response.data['completed_bookings'] == 0

    def test_recompute(self, api_client, create_booking, provider_id):
        create_booking(status=Booking.Status.COMPLETED)

        response = api_client.post(f'{stats_url(provider_id)}recompute/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['completed_bookings'] == 1

    def test_stats_are_read_only(self, api_client, provider_id):
        response = api_client.patch(stats_url(provider_id), data={'rating': '5.00'}, format='json')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


@pytest.mark.django_db
class TestStorageUnavailable:
    def test_transient_error_is_503(self, api_client, sample_booking_data):
        with patch.object(
            AvailabilityService, 'find_conflict',
            side_effect=TransientStorageError('find_conflict')
        ):
            response = api_client.post('/api/v1/bookings/', data=sample_booking_data, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['error']['code'] == 'STORAGE_UNAVAILABLE'
        assert response.data['error']['details'] == {'retryable': True}
