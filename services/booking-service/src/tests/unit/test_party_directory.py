# services/booking-service/src/tests/unit/test_party_directory.py
"""
Unit Tests for party summaries and service clients
"""

import uuid

import httpx
import pytest

from apps.core.services import PartyDirectory
from shared.common.clients import (
    CatalogServiceClient,
    CircuitBreaker,
    CustomerServiceClient,
    ProviderServiceClient,
)


def make_directory(handler):
    transport = httpx.MockTransport(handler)
    return PartyDirectory(
        customer_client=CustomerServiceClient(base_url='http://customers', transport=transport),
        provider_client=ProviderServiceClient(base_url='http://providers', transport=transport),
        catalog_client=CatalogServiceClient(base_url='http://catalog', transport=transport),
    )


@pytest.fixture
def resolution_enabled(settings):
    settings.PARTY_RESOLUTION_ENABLED = True


@pytest.mark.usefixtures('resolution_enabled')
class TestPartyDirectory:
    """Tests for PartyDirectory lookups."""

    def test_resolves_summaries(self):
        calls = []

        def handler(request):
            calls.append(request.url.host)
            if request.url.host == 'customers':
                return httpx.Response(200, json={
                    'data': {'first_name': 'Ada', 'last_name': 'Lovelace', 'email': 'ada@example.com'}
                })
            if request.url.host == 'providers':
                return httpx.Response(200, json={'business_name': 'Sparkle Cleaning'})
            return httpx.Response(200, json={'name': 'Deep clean', 'price': '120.00'})

        directory = make_directory(handler)
        customer_id, provider_id, service_id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

        assert directory.resolve_customer(customer_id) == {
            'id': str(customer_id), 'name': 'Ada Lovelace', 'email': 'ada@example.com',
        }
        assert directory.resolve_provider(provider_id) == {
            'id': str(provider_id), 'name': 'Sparkle Cleaning',
        }
        assert directory.resolve_service(service_id) == {
            'id': str(service_id), 'name': 'Deep clean', 'price': '120.00',
        }
        assert calls == ['customers', 'providers', 'catalog']

    def test_summaries_are_cached(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(200, json={'name': 'Sparkle Cleaning'})

        directory = make_directory(handler)
        provider_id = uuid.uuid4()

        directory.resolve_provider(provider_id)
        directory.resolve_provider(provider_id)

        assert calls == [f'/api/v1/providers/{provider_id}/']

    def test_missing_party_is_none(self):
        directory = make_directory(lambda request: httpx.Response(404, json={}))
        assert directory.resolve_customer(uuid.uuid4()) is None

    def test_unreachable_collaborator_is_none(self):
        def handler(request):
            raise httpx.ConnectError('connection refused', request=request)

        directory = make_directory(handler)
        assert directory.resolve_service(uuid.uuid4()) is None

    def test_disabled_returns_reference_only(self, settings):
        settings.PARTY_RESOLUTION_ENABLED = False

        def handler(request):
            raise AssertionError('no remote call expected')

        customer_id = uuid.uuid4()
        assert make_directory(handler).resolve_customer(customer_id) == {'id': str(customer_id)}


class TestCircuitBreaker:
    def test_opens_after_threshold(self):
        breaker = CircuitBreaker(failure_threshold=2, timeout=60)

        breaker.record_failure()
        assert breaker.can_execute()
        breaker.record_failure()

        assert breaker.state == 'open'
        assert not breaker.can_execute()

    def test_half_open_probe_closes_on_success(self):
        breaker = CircuitBreaker(failure_threshold=1, success_threshold=1, timeout=0)
        breaker.record_failure()

        assert breaker.can_execute()
        assert breaker.state == 'half_open'
        breaker.record_success()
        assert breaker.state == 'closed'
