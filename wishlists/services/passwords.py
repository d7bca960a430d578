"""Password verification for password-protected lists."""

from __future__ import annotations

from django.contrib.auth.hashers import check_password, make_password


def verify_list_password(candidate: str, stored_hash: str) -> bool:
    """Return True when `candidate` matches `stored_hash`; an unset hash never matches."""
    if not stored_hash or not candidate:
        return False
    return check_password(candidate, stored_hash)


def hash_list_password(raw: str) -> str:
    return make_password(raw) if raw else ""
