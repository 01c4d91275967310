"""
Production settings for Django.

Extends base settings with production‑hardened configuration.
"""
from .base import *

# Production security
DEBUG = False

# ALLOWED_HOSTS must be explicitly set in environment.
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")  # No default – must be set in production

# HTTPS/SSL settings
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=31536000)
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_REFERRER_POLICY = "strict-origin-when-cross-origin"

# CORS in production
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[])
CORS_ALLOW_CREDENTIALS = True

# CSRF trusted origins – required when frontend is on a different domain
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])

# Database settings
DATABASES["default"]["CONN_MAX_AGE"] = 600
DATABASES["default"]["OPTIONS"]["sslmode"] = "require"

# Cache settings for production
CACHES["default"]["OPTIONS"].update({
    "SOCKET_CONNECT_TIMEOUT": 5,
    "SOCKET_TIMEOUT": 5,
    "RETRY_ON_TIMEOUT": True,
})

# Celery in production
CELERY_TASK_ALWAYS_EAGER = False

LOGGING["loggers"]["django"]["level"] = "WARNING"
LOGGING["handlers"]["file"]["level"] = "ERROR"

# SECRET_KEY must be set in environment – overriding any default from base.
SECRET_KEY = env("SECRET_KEY")
