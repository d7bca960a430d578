"""
Unit-of-work helper over `django.db.transaction`.

`run_in_transaction(*steps)` executes each zero-argument callable in order
inside one `transaction.atomic()` block and returns their results. Either every
step's writes commit, or the first exception propagates unchanged and nothing
is persisted.

Usage
-----
    created, _ = run_in_transaction(
        lambda: ListAdmin.objects.get_or_create(wishlist_id=..., user_id=...),
        lambda: invitation.save(update_fields=["accepted_at"]),
    )

Notes
-----
- Work that must happen only after a successful commit (emails, audit rows)
  belongs in `transaction.on_commit`, not in a step.
- Nested calls join the outer transaction (savepoint semantics of `atomic`).
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from django.db import transaction


def run_in_transaction(*steps: Callable[[], Any], using: Optional[str] = None) -> list[Any]:
    """Run `steps` atomically and return their results in order."""
    with transaction.atomic(using=using):
        return [step() for step in steps]
