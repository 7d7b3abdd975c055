# shared/common/clients.py
"""
Service Clients for Inter-Service Communication
"""

import time
import httpx
import logging
from typing import Dict, Any, Optional
from django.conf import settings

logger = logging.getLogger(__name__)


# =============================================================================
# CIRCUIT BREAKER
# =============================================================================

class CircuitBreakerError(Exception):
    """Exception raised when circuit breaker is open"""
    pass


class CircuitBreaker:
    """
    Circuit breaker for a remote service.

    Opens after `failure_threshold` consecutive failures, lets a probe
    through after `timeout` seconds and closes again after
    `success_threshold` probe successes.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        success_threshold: int = 2,
        timeout: int = 30
    ):
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.timeout = timeout
        self.failure_count = 0
        self.success_count = 0
        self.state = 'closed'  # closed, open, half_open
        self.last_failure_time = None

    def _should_try_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.monotonic() - self.last_failure_time >= self.timeout

    def record_success(self):
        if self.state == 'half_open':
            self.success_count += 1
            if self.success_count >= self.success_threshold:
                self._reset()
        else:
            self.failure_count = 0

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = time.monotonic()
        if self.state == 'half_open' or self.failure_count >= self.failure_threshold:
            self.state = 'open'
            self.success_count = 0
            logger.warning(f"Circuit breaker opened after {self.failure_count} failures")

    def _reset(self):
        self.state = 'closed'
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time = None
        logger.info("Circuit breaker reset to closed state")

    def can_execute(self) -> bool:
        if self.state == 'closed':
            return True
        if self.state == 'open':
            if self._should_try_reset():
                self.state = 'half_open'
                return True
            return False
        return True  # half_open


# =============================================================================
# BASE SERVICE CLIENT
# =============================================================================

class BaseServiceClient:
    """
    Base class for service-to-service HTTP communication.

    `transport` lets tests plug in an httpx.MockTransport.
    """

    def __init__(
        self,
        service_name: str,
        base_url: str = None,
        transport: httpx.BaseTransport = None
    ):
        self.service_name = service_name
        self.base_url = base_url or self._get_service_url(service_name)
        self.timeout = httpx.Timeout(
            getattr(settings, 'SERVICE_CLIENT_TIMEOUT', 5.0), connect=2.0
        )
        self.auth_token = getattr(settings, 'SERVICE_AUTH_TOKEN', '')
        self.transport = transport
        self.circuit_breaker = CircuitBreaker()

    def _get_service_url(self, service_name: str) -> str:
        """Get service URL from settings"""
        service_urls = getattr(settings, 'SERVICE_URLS', {})
        return service_urls.get(service_name, f'http://{service_name}:8000')

    def _get_headers(self, extra_headers: Dict = None) -> Dict:
        """Build request headers"""
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'X-Service-Auth': self.auth_token,
            'X-Source-Service': getattr(settings, 'SERVICE_NAME', 'unknown'),
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Dict = None,
        data: Dict = None,
        headers: Dict = None
    ) -> Dict:
        """Make HTTP request to service"""
        if not self.circuit_breaker.can_execute():
            raise CircuitBreakerError(f"Circuit breaker open for {self.service_name}")

        url = f"{self.base_url}{path}"

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=data,
                    headers=self._get_headers(headers)
                )
                response.raise_for_status()
                self.circuit_breaker.record_success()
                return response.json()
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"HTTP error calling {self.service_name}: {e.response.status_code}",
                    extra={'url': url, 'status_code': e.response.status_code}
                )
                if e.response.status_code >= 500:
                    self.circuit_breaker.record_failure()
                raise
            except httpx.RequestError as e:
                logger.error(f"Request error calling {self.service_name}: {e}")
                self.circuit_breaker.record_failure()
                raise

    def get(self, path: str, params: Dict = None, headers: Dict = None) -> Dict:
        return self._request('GET', path, params=params, headers=headers)

    def get_or_none(self, path: str, params: Dict = None) -> Optional[Dict[str, Any]]:
        """GET that reports a 404 as None instead of raising."""
        try:
            return self.get(path, params=params)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise


# =============================================================================
# PARTY CLIENTS
# =============================================================================

class CustomerServiceClient(BaseServiceClient):
    """Client for Customer Service"""

    def __init__(self, **kwargs):
        super().__init__('customer-service', **kwargs)

    def get_customer(self, customer_id: str) -> Optional[Dict]:
        return self.get_or_none(f'/api/v1/customers/{customer_id}/')


class ProviderServiceClient(BaseServiceClient):
    """Client for Provider Service"""

    def __init__(self, **kwargs):
        super().__init__('provider-service', **kwargs)

    def get_provider(self, provider_id: str) -> Optional[Dict]:
        return self.get_or_none(f'/api/v1/providers/{provider_id}/')


class CatalogServiceClient(BaseServiceClient):
    """Client for Service Catalog"""

    def __init__(self, **kwargs):
        super().__init__('catalog-service', **kwargs)

    def get_service(self, service_id: str) -> Optional[Dict]:
        return self.get_or_none(f'/api/v1/services/{service_id}/')
