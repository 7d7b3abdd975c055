"""
Health Check Module.

Liveness and readiness endpoints for the service.
"""
import logging
import time
from typing import Dict, Any

from django.db import DatabaseError, connection
from django.core.cache import cache
from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


# =============================================================================
# HEALTH CHECK STATUS
# =============================================================================

class HealthStatus:
    """Health check status constants."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


# =============================================================================
# HEALTH CHECK FUNCTIONS
# =============================================================================

def check_database() -> Dict[str, Any]:
    """Check database connectivity."""
    start = time.monotonic()
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "name": "database",
            "status": HealthStatus.UNHEALTHY,
        }

    latency = (time.monotonic() - start) * 1000
    return {
        "name": "database",
        "status": HealthStatus.HEALTHY,
        "latency_ms": round(latency, 2),
    }


def check_cache() -> Dict[str, Any]:
    """
    Check cache connectivity.

    The cache only holds party summaries, so a failure degrades the
    service rather than taking it out of rotation.
    """
    start = time.monotonic()
    try:
        cache_key = f"health_check_{time.time()}"
        cache.set(cache_key, "OK", 10)
        value = cache.get(cache_key)
        cache.delete(cache_key)
    except Exception as e:  # backend-specific connection errors
        logger.warning(f"Cache health check failed: {e}")
        return {
            "name": "cache",
            "status": HealthStatus.DEGRADED,
        }

    if value != "OK":
        return {
            "name": "cache",
            "status": HealthStatus.DEGRADED,
        }

    latency = (time.monotonic() - start) * 1000
    return {
        "name": "cache",
        "status": HealthStatus.HEALTHY,
        "latency_ms": round(latency, 2),
    }


# =============================================================================
# HEALTH CHECK VIEWS
# =============================================================================

@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """
    Simple health check endpoint.

    Returns 200 if the service is running.
    """
    return Response({
        "status": HealthStatus.HEALTHY,
        "service": getattr(settings, 'SERVICE_NAME', 'unknown'),
        "timestamp": timezone.now().isoformat(),
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Readiness probe endpoint.

    Returns 503 while the database is unreachable.
    """
    checks = [
        check_database(),
        check_cache(),
    ]

    statuses = [c["status"] for c in checks]
    if HealthStatus.UNHEALTHY in statuses:
        overall_status = HealthStatus.UNHEALTHY
        status_code = 503
    elif HealthStatus.DEGRADED in statuses:
        overall_status = HealthStatus.DEGRADED
        status_code = 200
    else:
        overall_status = HealthStatus.HEALTHY
        status_code = 200

    return Response(
        {
            "status": overall_status,
            "checks": checks,
            "timestamp": timezone.now().isoformat(),
        },
        status=status_code
    )


# =============================================================================
# URL PATTERNS
# =============================================================================

def get_health_urlpatterns():
    """
    Returns URL patterns for health check endpoints.

    Usage in urls.py:
        from shared.common.health import get_health_urlpatterns
        urlpatterns += get_health_urlpatterns()
    """
    from django.urls import path

    return [
        path('health/', health_check, name='health'),
        path('ready/', readiness_check, name='readiness'),
    ]
