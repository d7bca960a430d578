"""
Developer settings (extends base).

Defaults
--------
- DEBUG defaults True (overridable via env).
- Console email backend, so invitation emails land in the runserver output.
- SQLite by default unless `DATABASE_URL` is provided.

Security
--------
- Do not use these settings in production; cookies and HTTPS flags are not forced
  here. Use `prod.py` for hardened defaults.
"""

from .base import *  # noqa

DEBUG = env.bool("DEBUG", True)

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

CSRF_TRUSTED_ORIGINS = env.list(
    "CSRF_TRUSTED_ORIGINS",
    default=[
        "http://127.0.0.1:8000",
        "http://localhost:8000",
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ],
)

# SPA reads csrftoken to attach X-CSRFToken on unsafe methods.
CSRF_COOKIE_HTTPONLY = False

LOGGING["loggers"]["wishlists"]["level"] = "DEBUG"  # type: ignore[name-defined]
