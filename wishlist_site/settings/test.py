"""
Test settings (extends base).

- In-memory SQLite and a fast password hasher keep the suite quick.
- locmem email backend so tests can inspect `django.core.mail.outbox`.
- locmem cache so throttle counters reset with `cache.clear()`.
"""

from .base import *  # noqa

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
}
