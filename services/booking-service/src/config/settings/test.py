"""
Test Settings

Django settings for running tests.
"""

from .base import *  # noqa: F401,F403

# Test mode
DEBUG = False
TESTING = True

# Use in-memory SQLite for faster tests
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}


# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

# Use local memory cache
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
}

# JWT settings for testing
JWT_SECRET_KEY = 'test-secret-key-for-testing-only'
JWT_SETTINGS = dict(
    JWT_SETTINGS,  # noqa: F405
    SIGNING_KEY=JWT_SECRET_KEY,
    VERIFYING_KEY=JWT_SECRET_KEY,
    ALGORITHM='HS256',
)
SERVICE_AUTH_TOKEN = 'test-service-token'

# Event backend for testing
EVENT_BACKEND = 'memory'

# Collaborators are not reachable from tests
PARTY_RESOLUTION_ENABLED = False

# Logging - minimal output during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
        'apps': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
    },
}

# CORS - allow all for testing
CORS_ALLOW_ALL_ORIGINS = True
