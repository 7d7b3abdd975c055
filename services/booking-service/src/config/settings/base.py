"""Base settings for Booking Service."""
import os
import sys
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(BASE_DIR.parent.parent.parent))

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'rest_framework',
    'corsheaders',
    'django_filters',
    'apps.core',
    'apps.api',
]

MIDDLEWARE = [
    'shared.common.middleware.RequestIDMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'shared.common.middleware.LoggingMiddleware',
]

ROOT_URLCONF = 'config.urls'
TEMPLATES = [{'BACKEND': 'django.template.backends.django.DjangoTemplates', 'DIRS': [], 'APP_DIRS': True, 'OPTIONS': {'context_processors': ['django.template.context_processors.request']}}]
WSGI_APPLICATION = 'config.wsgi.application'

# Every statement runs under a server-side timeout; OperationalError on expiry
# is reported to callers as a retryable storage error.
DB_STATEMENT_TIMEOUT_MS = int(os.environ.get('DB_STATEMENT_TIMEOUT_MS', '5000'))
DB_CONNECT_TIMEOUT = int(os.environ.get('DB_CONNECT_TIMEOUT', '5'))

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'booking_service_db'),
        'USER': os.environ.get('DB_USER', 'booking_service_user'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'booking_service_password'),
        'HOST': os.environ.get('DB_HOST', 'pgbouncer'),
        'PORT': os.environ.get('DB_PORT', '6432'),
        'CONN_MAX_AGE': int(os.environ.get('DB_CONN_MAX_AGE', '60')),
        'OPTIONS': {
            'connect_timeout': DB_CONNECT_TIMEOUT,
            'options': f'-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}',
        },
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'shared.common.authentication.JWTAuthentication',
        'shared.common.authentication.ServiceAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.IsAuthenticated'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PAGINATION_CLASS': 'shared.common.pagination.StandardPagination',
    'PAGE_SIZE': 20,
    'DEFAULT_FILTER_BACKENDS': ['django_filters.rest_framework.DjangoFilterBackend'],
    'EXCEPTION_HANDLER': 'shared.common.exceptions.custom_exception_handler',
    'UNAUTHENTICATED_USER': None,
}

CORS_ALLOW_ALL_ORIGINS = DEBUG
REDIS_URL = os.environ.get('REDIS_URL', 'redis://redis:6379/4')
CACHES = {'default': {'BACKEND': 'django_redis.cache.RedisCache', 'LOCATION': REDIS_URL}}

# Auth: tokens are issued by the auth service
JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', SECRET_KEY)
JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'HS256')
JWT_SETTINGS = {
    'ALGORITHM': JWT_ALGORITHM,
    'SIGNING_KEY': JWT_SECRET_KEY,
    'VERIFYING_KEY': os.environ.get('JWT_VERIFYING_KEY', JWT_SECRET_KEY),
    'ISSUER': os.environ.get('JWT_ISSUER', 'home-services-auth'),
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.environ.get('JWT_ACCESS_TOKEN_MINUTES', '60'))),
}
SERVICE_AUTH_TOKEN = os.environ.get('SERVICE_AUTH_TOKEN', '')

SERVICE_NAME = 'booking-service'
SERVICE_PORT = 8005

# Collaborators
SERVICE_URLS = {
    'customer-service': os.environ.get('CUSTOMER_SERVICE_URL', 'http://customer-service:8000'),
    'provider-service': os.environ.get('PROVIDER_SERVICE_URL', 'http://provider-service:8000'),
    'catalog-service': os.environ.get('CATALOG_SERVICE_URL', 'http://catalog-service:8000'),
}
SERVICE_CLIENT_TIMEOUT = float(os.environ.get('SERVICE_CLIENT_TIMEOUT', '5'))
PARTY_RESOLUTION_ENABLED = os.environ.get('PARTY_RESOLUTION_ENABLED', 'True').lower() == 'true'
PARTY_CACHE_TIMEOUT = int(os.environ.get('PARTY_CACHE_TIMEOUT', '300'))

# Bookings
BOOKING_NUMBER_PREFIX = os.environ.get('BOOKING_NUMBER_PREFIX', 'AME')
BOOKING_NUMBER_MAX_ATTEMPTS = 5

# Events
EVENT_PUBLISHING_ENABLED = os.environ.get('EVENT_PUBLISHING_ENABLED', 'True').lower() == 'true'
EVENT_BACKEND = os.environ.get('EVENT_BACKEND', 'log')
EVENT_WEBHOOK_URL = os.environ.get('EVENT_WEBHOOK_URL')

LOGGING = {'version': 1, 'disable_existing_loggers': False, 'filters': {'request_id': {'()': 'shared.common.middleware.RequestIDLogFilter'}}, 'formatters': {'json': {'()': 'pythonjsonlogger.jsonlogger.JsonFormatter', 'format': '%(asctime)s %(levelname)s %(name)s %(request_id)s %(message)s'}}, 'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'json', 'filters': ['request_id']}}, 'root': {'handlers': ['console'], 'level': os.environ.get('LOG_LEVEL', 'INFO')}}
