"""
Django settings for the Subscription Platform.
Production-ready settings with configuration management.
"""
import os
from pathlib import Path
from datetime import timedelta
import environ
from celery.schedules import crontab

# Build paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
APPS_DIR = BASE_DIR / "backend" / "apps"

# Environment setup
env = environ.Env()
environ.Env.read_env(BASE_DIR / ".env")

# Debug mode (development is the only environment that defaults to it)
DEBUG = env.bool("DEBUG", default=os.environ.get("DJANGO_ENV", "development") == "development")

# ============================================================================
# CRITICAL: Secret key – must be explicitly set in production.
# In development we allow a fallback for convenience.
# ============================================================================
if DEBUG:
    SECRET_KEY = env("SECRET_KEY", default="django-insecure-development-key-change-in-production")
else:
    SECRET_KEY = env("SECRET_KEY")  # No default – crashes if missing

# ============================================================================
# CRITICAL: Allowed hosts – in production this must be set; development defaults are safe.
# ============================================================================
if DEBUG:
    ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])
else:
    ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")  # No default – crashes if missing

# ============================================================================
# CRITICAL: Redis – required in production for cache and broker.
# ============================================================================
if DEBUG:
    REDIS_URL = env("REDIS_URL", default="redis://localhost:6379/1")
else:
    REDIS_URL = env("REDIS_URL")  # No default – crashes if missing

# ============================================================================
# APPLICATION DEFINITION
# ============================================================================
INSTALLED_APPS = [
    # ----- Custom apps (must be first for User model) -----
    "backend.apps.accounts",
    "backend.apps.catalog",
    "backend.apps.payments",
    "backend.apps.memberships",
    "backend.apps.dashboard",

    # ----- Django admin replacement (links the dependency report) -----
    "backend.apps.health_check.admin_config.CustomAdminConfig",

    # ----- Django contrib apps (NO django.contrib.admin) -----
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # ----- Third‑party apps -----
    "rest_framework",
    "rest_framework_simplejwt",
    "corsheaders",
    "drf_spectacular",
    "django_filters",
    "django_celery_beat",

    # ----- Health check app itself -----
    "backend.apps.health_check",
]

# ============================================================================
# MIDDLEWARE
# ============================================================================
MIDDLEWARE = [
    # ----- Security (must be early) -----
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",               # Must be before CommonMiddleware

    # ----- Django core (required for admin & sessions) -----
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",

    # ----- Custom security & audit -----
    "backend.core.middleware.SecurityHeadersMiddleware",
    "backend.core.middleware.RequestAuditMiddleware",
]

# URL configuration
ROOT_URLCONF = "backend.config.urls"

# Templates (Django admin and the browsable schema views only)
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# WSGI/ASGI
WSGI_APPLICATION = "backend.config.wsgi.application"
ASGI_APPLICATION = "backend.config.asgi.application"

# ============================================================================
# CRITICAL: Database – must have explicit credentials in production.
# ============================================================================
def _db_setting(name, default_dev):
    """Helper to require env var in production, allow default in development."""
    if DEBUG:
        return env(name, default=default_dev)
    else:
        return env(name)  # No default – crashes if missing

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": _db_setting("POSTGRES_DB", "subscription_platform"),
        "USER": _db_setting("POSTGRES_USER", "postgres"),
        "PASSWORD": _db_setting("POSTGRES_PASSWORD", "postgres"),
        "HOST": _db_setting("POSTGRES_HOST", "localhost"),
        "PORT": _db_setting("POSTGRES_PORT", "5432"),
        "CONN_MAX_AGE": 600,
        "OPTIONS": {"sslmode": "prefer"},
    }
}

# Sessions
SESSION_ENGINE = "django.contrib.sessions.backends.cached_db"
SESSION_CACHE_ALIAS = "default"

# ============================================================================
# CACHES
# ============================================================================
CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": REDIS_URL,
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
            "CONNECTION_POOL_KWARGS": {"max_connections": 100, "retry_on_timeout": True},
            "IGNORE_EXCEPTIONS": env.bool("CACHE_IGNORE_EXCEPTIONS", default=False),
            "SOCKET_CONNECT_TIMEOUT": 5,
            "SOCKET_TIMEOUT": 5,
        },
        "KEY_PREFIX": "subscription_platform",
        "TIMEOUT": 60 * 15,
    }
}

# ============================================================================
# CELERY CONFIGURATION
# ============================================================================
CELERY_BROKER_URL = env("CELERY_BROKER_URL", default=REDIS_URL)
CELERY_RESULT_BACKEND = env("CELERY_RESULT_BACKEND", default=REDIS_URL)
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = "UTC"
CELERY_ENABLE_UTC = True
CELERY_BEAT_SCHEDULER = "django_celery_beat.schedulers:DatabaseScheduler"
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER", default=DEBUG)
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True
CELERY_TASK_DEFAULT_QUEUE = 'default'
CELERY_WORKER_CONCURRENCY = env.int('CELERY_WORKER_CONCURRENCY', default=4)

# Persist lazily computed membership expiry
CELERY_BEAT_SCHEDULE = {
    "expire-lapsed-memberships": {
        "task": "memberships.tasks.expire_memberships",
        "schedule": crontab(minute=f"*/{env.int('MEMBERSHIP_EXPIRY_SWEEP_MINUTES', default=15)}"),
        "options": {"queue": "maintenance"},
    },
}

# ============================================================================
# AUTHENTICATION
# ============================================================================
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator", "OPTIONS": {"min_length": 12}},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

AUTH_USER_MODEL = "accounts.User"

# ============================================================================
# INTERNATIONALIZATION
# ============================================================================
LANGUAGE_CODE = "en-us"
TIME_ZONE = env("TIME_ZONE", default="UTC")
USE_I18N = True
USE_TZ = True

# ============================================================================
# STATIC FILES
# ============================================================================
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ============================================================================
# REST FRAMEWORK & JWT
# ============================================================================
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": env("ANON_THROTTLE_RATE", default="100/hour"),
        "user": env("USER_THROTTLE_RATE", default="1000/hour"),
    },
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "backend.core.exceptions.custom_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=15),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "ROTATE_REFRESH_TOKENS": True,
    "UPDATE_LAST_LOGIN": True,
    "ALGORITHM": "HS256",
    "SIGNING_KEY": SECRET_KEY,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
}

# ============================================================================
# CORS
# ============================================================================
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[
    "http://localhost:3000",
    "http://127.0.0.1:3000",
] if DEBUG else [])
CORS_ALLOW_CREDENTIALS = True

# ============================================================================
# SECURITY
# ============================================================================
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_AGE = 1209600

# ============================================================================
# PAYMENT GATEWAY
# ============================================================================
PAYMENT_GATEWAY_CLASS = env(
    "PAYMENT_GATEWAY_CLASS",
    default="backend.apps.payments.gateway.MockGateway",
)
# Shared secret for callback signatures; unsigned callbacks are accepted when unset
PAYMENT_CALLBACK_SECRET = env("PAYMENT_CALLBACK_SECRET", default=None)
PAYMENT_TOKEN_PREFIX = env("PAYMENT_TOKEN_PREFIX", default="snap-token-")
# Gateways deliver from a handful of addresses, so the per-IP limit is generous
PAYMENT_CALLBACK_THROTTLE_RATE = env("PAYMENT_CALLBACK_THROTTLE_RATE", default="1000/minute")

# ============================================================================
# DASHBOARD & MEMBERSHIPS
# ============================================================================
DASHBOARD_RECENT_LIMIT = env.int("DASHBOARD_RECENT_LIMIT", default=5)
MEMBERSHIP_EXPIRY_SWEEP_MINUTES = env.int("MEMBERSHIP_EXPIRY_SWEEP_MINUTES", default=15)

# ============================================================================
# ADMIN
# ============================================================================
ADMINS = [("System Admin", env("ADMIN_EMAIL", default="admin@example.com"))]

# ============================================================================
# LOGGING
# ============================================================================
# NOTE: The file handler requires that the 'logs' directory exists and is writable.
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {"format": "{levelname} {name} {message}", "style": "{"},
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
        "file": {
            "level": "WARNING",
            "class": "logging.FileHandler",
            "filename": BASE_DIR / "logs" / "django.log",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": True,
        },
        "backend": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
        "django_redis": {
            "handlers": ["file"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}

# ============================================================================
# DRF SPECTACULAR
# ============================================================================
SPECTACULAR_SETTINGS = {
    "TITLE": "Subscription Platform API",
    "DESCRIPTION": "Subscription packages, payments and memberships",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
}
