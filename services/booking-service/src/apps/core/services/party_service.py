# services/booking-service/src/apps/core/services/party_service.py
"""
Party Directory

Resolves customer, provider and service references into small summaries
for booking responses. Absence or an unreachable collaborator yields None;
neither is an error for the booking core.
"""

import logging
from typing import Optional, Dict, Any

import httpx
from django.conf import settings
from django.core.cache import cache

from shared.common.clients import (
    CircuitBreakerError,
    CustomerServiceClient,
    ProviderServiceClient,
    CatalogServiceClient,
)

logger = logging.getLogger(__name__)

# Sentinel cached for parties the collaborator reported as missing
MISSING = '__missing__'


def _display_name(data: Dict[str, Any]) -> Optional[str]:
    if data.get('name'):
        return data['name']
    for key in ('business_name', 'businessName'):
        if data.get(key):
            return data[key]
    first = data.get('first_name') or data.get('firstName') or ''
    last = data.get('last_name') or data.get('lastName') or ''
    full = f"{first} {last}".strip()
    return full or None


class PartyDirectory:
    """Cached lookups of party summaries."""

    def __init__(
        self,
        customer_client: CustomerServiceClient = None,
        provider_client: ProviderServiceClient = None,
        catalog_client: CatalogServiceClient = None
    ):
        self.customer_client = customer_client or CustomerServiceClient()
        self.provider_client = provider_client or ProviderServiceClient()
        self.catalog_client = catalog_client or CatalogServiceClient()

    @property
    def enabled(self) -> bool:
        return getattr(settings, 'PARTY_RESOLUTION_ENABLED', True)

    @property
    def cache_timeout(self) -> int:
        return getattr(settings, 'PARTY_CACHE_TIMEOUT', 300)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    def resolve_customer(self, customer_id) -> Optional[Dict[str, Any]]:
        return self._resolve(
            'customer', customer_id,
            self.customer_client.get_customer,
            lambda data: {
                'id': str(customer_id),
                'name': _display_name(data),
                'email': data.get('email'),
            }
        )

    def resolve_provider(self, provider_id) -> Optional[Dict[str, Any]]:
        return self._resolve(
            'provider', provider_id,
            self.provider_client.get_provider,
            lambda data: {
                'id': str(provider_id),
                'name': _display_name(data),
            }
        )

    def resolve_service(self, service_id) -> Optional[Dict[str, Any]]:
        return self._resolve(
            'service', service_id,
            self.catalog_client.get_service,
            lambda data: {
                'id': str(service_id),
                'name': _display_name(data),
                'price': data.get('price'),
            }
        )

    def summaries_for(self, booking) -> Dict[str, Optional[Dict[str, Any]]]:
        """Customer, provider and service summaries for a booking."""
        return {
            'customer': self.resolve_customer(booking.customer_id),
            'provider': self.resolve_provider(booking.provider_id),
            'service': self.resolve_service(booking.service_id),
        }

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _resolve(self, kind, party_id, fetch, project) -> Optional[Dict[str, Any]]:
        if not party_id:
            return None

        if not self.enabled:
            return {'id': str(party_id)}

        cache_key = f"party:{kind}:{party_id}"
        cached = cache.get(cache_key)
        if cached == MISSING:
            return None
        if cached is not None:
            return cached

        try:
            response = fetch(str(party_id))
        except (httpx.HTTPError, CircuitBreakerError, ValueError) as e:
            logger.warning(f"Could not resolve {kind} {party_id}: {e}")
            return None

        if response is None:
            cache.set(cache_key, MISSING, self.cache_timeout)
            return None

        data = response.get('data', response) if isinstance(response, dict) else {}
        summary = project(data or {})
        cache.set(cache_key, summary, self.cache_timeout)
        return summary
