# shared/common/middleware.py
"""
Custom Middleware Classes
"""

import uuid
import time
import logging
from contextvars import ContextVar
from typing import Callable, Optional
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

HEALTH_PATHS = ('/health/', '/ready/')
MAX_REQUEST_ID_LENGTH = 64

# Request ID of the request being handled, for log records emitted outside views
current_request_id: ContextVar[Optional[str]] = ContextVar('current_request_id', default=None)


class RequestIDLogFilter(logging.Filter):
    """Adds the current request ID to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'request_id'):
            record.request_id = current_request_id.get()
        return True


class RequestIDMiddleware:
    """
    Middleware that adds a unique request ID to each request.
    The ID is used for request tracing across services.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Reuse the caller's ID when it is sane, otherwise mint one
        request_id = request.headers.get('X-Request-ID', '').strip()
        if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
            request_id = str(uuid.uuid4())

        request.request_id = request_id
        token = current_request_id.set(request_id)
        try:
            response = self.get_response(request)
        finally:
            current_request_id.reset(token)

        response['X-Request-ID'] = request_id
        return response


class LoggingMiddleware:
    """
    Middleware that logs request/response information.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Skip health check endpoints
        if request.path in HEALTH_PATHS:
            return self.get_response(request)

        start_time = time.monotonic()

        # Log request
        logger.info(
            f"Request started: {request.method} {request.path}",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'method': request.method,
                'path': request.path,
                'user_id': str(getattr(getattr(request, 'user', None), 'id', None)),
                'ip_address': self.get_client_ip(request),
            }
        )

        # Process request
        response = self.get_response(request)

        # Calculate duration
        duration = time.monotonic() - start_time

        # Log response
        log_method = logger.warning if response.status_code >= 400 else logger.info
        log_method(
            f"Request completed: {request.method} {request.path} - {response.status_code}",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': round(duration * 1000, 2),
                'user_id': str(getattr(getattr(request, 'user', None), 'id', None)),
            }
        )

        # Add timing header
        response['X-Response-Time'] = f"{duration * 1000:.2f}ms"

        return response

    def get_client_ip(self, request: HttpRequest) -> str:
        """Extract client IP from request"""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR', '')
