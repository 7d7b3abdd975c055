# shared/common/authentication.py
"""
JWT Authentication and Service-to-Service Authentication

Tokens are issued by the auth service; this module only verifies them.
"""

import hmac
import jwt
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    JWT Token Authentication for API requests.
    Algorithm and keys come from settings.JWT_SETTINGS.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        auth_header = authentication.get_authorization_header(request)

        if not auth_header:
            return None

        try:
            auth_parts = auth_header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if len(auth_parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        if auth_parts[0].lower() != self.keyword.lower():
            return None

        token = auth_parts[1]
        return self.authenticate_token(token)

    def authenticate_token(self, token: str) -> Tuple[Any, Dict]:
        """Validate and decode JWT token"""
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SETTINGS['VERIFYING_KEY'],
                algorithms=[settings.JWT_SETTINGS['ALGORITHM']],
                issuer=settings.JWT_SETTINGS['ISSUER'],
                options={
                    'require': ['exp', 'iat', 'sub', 'iss'],
                    'verify_exp': True,
                    'verify_iat': True,
                    'verify_iss': True,
                }
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        return (TokenUser(payload), payload)

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class ServiceAuthentication(authentication.BaseAuthentication):
    """
    Service-to-Service Authentication using shared secret token.
    Used by collaborators such as the review and payment services.
    """

    keyword = 'Service'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        service_token = request.headers.get('X-Service-Auth')

        if not service_token:
            return None

        expected = getattr(settings, 'SERVICE_AUTH_TOKEN', '')
        if not expected or not hmac.compare_digest(service_token, expected):
            raise exceptions.AuthenticationFailed('Invalid service token')

        source_service = request.headers.get('X-Source-Service', 'unknown')

        return (ServiceUser(source_service), {'service': source_service})

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    User object created from JWT token payload.
    """

    def __init__(self, payload: Dict):
        self.payload = payload
        self.id = payload.get('sub')
        self.user_id = payload.get('sub')
        self.email = payload.get('email')
        self.role = payload.get('role')
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"TokenUser({self.email or self.id})"

    def has_role(self, role: str) -> bool:
        """Check if user has a specific role (customer, provider, admin)"""
        return self.role == role


class ServiceUser:
    """
    User object for service-to-service authentication.
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.id = f"service:{service_name}"
        self.is_service = True
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"ServiceUser({self.service_name})"


def generate_access_token(user_id: str, email: str = None, role: str = 'customer') -> str:
    """
    Sign an access token with the configured signing key.

    Mirrors what the auth service issues; used for local tooling and tests.
    """
    now = datetime.now(timezone.utc)

    payload = {
        'sub': str(user_id),
        'email': email,
        'role': role,
        'iat': now,
        'exp': now + settings.JWT_SETTINGS['ACCESS_TOKEN_LIFETIME'],
        'iss': settings.JWT_SETTINGS['ISSUER'],
        'type': 'access',
    }

    return jwt.encode(
        payload,
        settings.JWT_SETTINGS['SIGNING_KEY'],
        algorithm=settings.JWT_SETTINGS['ALGORITHM']
    )
