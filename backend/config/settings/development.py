"""
Development settings.
"""
from .base import *

# Disable throttling in development
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]["anon"] = None
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]["user"] = None
PAYMENT_CALLBACK_THROTTLE_RATE = None

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]

# Security settings for development
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# CORS settings for development
CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]

# Logging for development
LOGGING["loggers"]["backend"]["level"] = "DEBUG"
LOGGING["handlers"]["console"]["level"] = "DEBUG"

# Database for development (can be overridden with .env)
DATABASES["default"]["CONN_MAX_AGE"] = 0  # Disable persistent connections
