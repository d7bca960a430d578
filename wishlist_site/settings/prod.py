from .base import *  # noqa

# ----------------------------------------------------------------------
# Core
# ----------------------------------------------------------------------
DEBUG = False

# Require an explicit secret in prod
SECRET_KEY = env("SECRET_KEY")

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=[])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])

# ----------------------------------------------------------------------
# Database (must NOT default to SQLite in prod)
# ----------------------------------------------------------------------
DATABASES = {
    "default": env.db("DATABASE_URL")
}

STATIC_ROOT = BASE_DIR / "staticfiles"

# ----------------------------------------------------------------------
# Email (invitations). Delivery is best-effort; failures are logged.
# ----------------------------------------------------------------------
EMAIL_BACKEND = env("EMAIL_BACKEND", default="django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = env("EMAIL_HOST", default="localhost")
EMAIL_PORT = env.int("EMAIL_PORT", default=25)
EMAIL_HOST_USER = env("EMAIL_HOST_USER", default="")
EMAIL_HOST_PASSWORD = env("EMAIL_HOST_PASSWORD", default="")
EMAIL_USE_TLS = env.bool("EMAIL_USE_TLS", default=True)

# ----------------------------------------------------------------------
# Security hardening (Django deploy checklist)
# ----------------------------------------------------------------------
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", True)

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
CSRF_COOKIE_HTTPONLY = True

SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", 60 * 60 * 24 * 7)  # 1 week
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"

# If behind a proxy/load balancer that terminates TLS
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

# ----------------------------------------------------------------------
# Logging: request and service channels stay structured; Django noise at WARNING.
# ----------------------------------------------------------------------
LOGGING["root"] = {"handlers": ["service_console"], "level": "INFO"}  # type: ignore[name-defined]
LOGGING["loggers"]["django.request"] = {"handlers": ["service_console"], "level": "WARNING", "propagate": False}  # type: ignore[name-defined]
LOGGING["loggers"]["django.security"] = {"handlers": ["service_console"], "level": "WARNING", "propagate": False}  # type: ignore[name-defined]
