"""
Base Django settings for the wishlist backend.

Layout
------
- Split settings: `base.py` (shared), `dev.py` (developer overrides), `prod.py`
  (hardened), `test.py` (fast hashing, locmem email/cache).
- `environ` is used to source configuration; a local `.env` is optional in dev.

API stack
---------
- Django 5.x + DRF + django-filter + drf-spectacular.
- SessionAuthentication with CSRF (kept enabled).
- Errors from every API view go through `core.exceptions.api_exception_handler`,
  which owns the status/code mapping of the domain error taxonomy.
- Throttling: global (`anon`, `user`) plus named scopes for the co-manager
  workflow: co-manager-add, co-manager-remove, invitation-accept.

Observability
-------------
- `core.middleware.RequestIDLogMiddleware` logs a single structured line per request
  (with request id, user id, duration). Domain services log to `wishlists.*`
  loggers, which carry the same request id through `core.logging.RequestIDFilter`.

Security
--------
- Default cookie `SameSite=Lax`, `X_FRAME_OPTIONS=DENY`. Production hardening lives
  in `prod.py` (HSTS, SECURE_*). Keep CSRF on; do not disable.
"""

from pathlib import Path
import environ

# ---------------------------------------------------------------------
# Paths & Env
# ---------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env = environ.Env(DEBUG=(bool, False))
env_file = BASE_DIR / ".env"
if env_file.exists():
    environ.Env.read_env(str(env_file))

# ---------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------
SECRET_KEY = env("SECRET_KEY", default="dev-insecure-change-me")
DEBUG = env.bool("DEBUG", False)

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["127.0.0.1", "localhost"])
CSRF_TRUSTED_ORIGINS = env.list(
    "CSRF_TRUSTED_ORIGINS",
    default=["http://127.0.0.1:8000", "http://localhost:8000"],
)

# ---------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------
INSTALLED_APPS = [
    # Django apps
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "django_filters",
    "drf_spectacular",

    # Local apps
    "accounts",
    "core",
    "wishlists",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Observability: request-id + structured request log (one line per request)
    "core.middleware.RequestIDLogMiddleware",
]

ROOT_URLCONF = "wishlist_site.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "wishlist_site.wsgi.application"

# ---------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------
DATABASES = {
    "default": env.db(
        "DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
    )
}

# ---------------------------------------------------------------------
# Password validation
# ---------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# ---------------------------------------------------------------------
# Internationalization
# ---------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------------------
# Static
# ---------------------------------------------------------------------
STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------------------------------------------------------------------
# DRF & API Schema
# ---------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 25,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    # Single place where domain errors become HTTP status codes.
    "EXCEPTION_HANDLER": "core.exceptions.api_exception_handler",
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
        "rest_framework.throttling.ScopedRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "user": env("DRF_THROTTLE_RATE_USER", default="200/min"),
        "anon": env("DRF_THROTTLE_RATE_ANON", default="50/min"),
        "co-manager-add": env("DRF_THROTTLE_RATE_CO_MANAGER_ADD", default="10/min"),
        "co-manager-remove": env("DRF_THROTTLE_RATE_CO_MANAGER_REMOVE", default="20/min"),
        "invitation-accept": env("DRF_THROTTLE_RATE_INVITATION_ACCEPT", default="10/min"),
        "audit-read": env("DRF_THROTTLE_RATE_AUDIT_READ", default="60/min"),
    },
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Wishlist API",
    "DESCRIPTION": "Wishlist backend: list permissions, co-managers and invitations.",
    "VERSION": "0.1.0",
    "SERVERS": [
        {"url": "http://127.0.0.1:8000", "description": "Local Dev"},
        {"url": "/", "description": "Current"},
    ],
    "OPERATION_ID_DUPLICATE_MODE": "suffix",
    "SWAGGER_UI_SETTINGS": {"persistAuthorization": True},
    "ENUM_NAME_OVERRIDES": {
        "VisibilityEnum": "wishlists.models.Visibility",
        "AuditActionEnum": "wishlists.models.AuditAction",
    },
}

# ---------------------------------------------------------------------
# Co-manager invitations
# ---------------------------------------------------------------------
# Days an emailed invitation stays acceptable; re-inviting refreshes the window.
LIST_INVITATION_TTL_DAYS = env.int("LIST_INVITATION_TTL_DAYS", default=7)
# Used to build the accept link in invitation emails.
APP_BASE_URL = env("APP_BASE_URL", default="http://localhost:8000")
DEFAULT_FROM_EMAIL = env("DEFAULT_FROM_EMAIL", default="wishlists@example.com")

# ---------------------------------------------------------------------
# Security defaults (safe baseline; prod hardening in prod.py)
# ---------------------------------------------------------------------
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SAMESITE = "Lax"
X_FRAME_OPTIONS = "DENY"

# ---------------------------------------------------------------------
# Auth model
# ---------------------------------------------------------------------
AUTH_USER_MODEL = "accounts.User"

# ---------------------------------------------------------------------
# Logging (observability)
# ---------------------------------------------------------------------
# The RequestIDFilter injects `request_id` even for logs outside HTTP contexts,
# so both formatters can reference it safely.
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "core.logging.RequestIDFilter"},
    },
    "formatters": {
        # Request lines carry the enrichers added by the middleware.
        "structured": {
            "format": "level=%(levelname)s logger=%(name)s request_id=%(request_id)s "
                      "method=%(method)s path=%(path)s status=%(status)s user_id=%(user_id)s duration_ms=%(duration_ms)s "
                      "message=%(message)s"
        },
        # Service lines only have the request id in common.
        "service": {
            "format": "level=%(levelname)s logger=%(name)s request_id=%(request_id)s message=%(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["request_id"],
            "formatter": "structured",
        },
        "service_console": {
            "class": "logging.StreamHandler",
            "filters": ["request_id"],
            "formatter": "service",
        },
    },
    "loggers": {
        # The middleware logs one line per request to this logger.
        "wishlist.request": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "wishlists": {
            "handlers": ["service_console"],
            "level": env("WISHLISTS_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
        "core": {
            "handlers": ["service_console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
