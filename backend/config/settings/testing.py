"""
Testing settings.
"""
import os

# Base settings require these outside development
os.environ.setdefault("SECRET_KEY", "testing-secret-key-not-for-production")
os.environ.setdefault("ALLOWED_HOSTS", "testserver,localhost")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from .base import *

DEBUG = False

# Use in-memory database for testing
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Disable password validation for testing
AUTH_PASSWORD_VALIDATORS = []

# Faster password hashing for testing
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Local memory cache; throttling and the health check still exercise it
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}
SESSION_ENGINE = "django.contrib.sessions.backends.db"

# Run tasks inline, no broker
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]["anon"] = None
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]["user"] = None
PAYMENT_CALLBACK_THROTTLE_RATE = "10000/hour"

PAYMENT_GATEWAY_CLASS = "backend.apps.payments.gateway.MockGateway"
PAYMENT_CALLBACK_SECRET = None

# Console-only logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler", "level": "WARNING"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}

# Disable CORS for testing
CORS_ALLOW_ALL_ORIGINS = True
