"""
Fire-and-forget audit trail for list-level actions.

`record_list_action()` schedules the `AuditLog` insert with
`transaction.on_commit`, so:

- nothing is recorded for a mutation that rolls back;
- a failing insert is logged and never propagates into the operation that
  triggered it.

The current request id (see `core.logging`) is captured at call time so the
row can be correlated with the request log line.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction

from core.logging import current_request_id
from wishlists.models import AuditLog

logger = logging.getLogger(__name__)


def record_list_action(list_id, actor_id, action: str, changes: Optional[dict] = None) -> None:
    request_id = current_request_id()
    payload = dict(changes or {})

    def _write() -> None:
        try:
            AuditLog.objects.create(
                actor_id=actor_id,
                list_id=list_id,
                action=action,
                changes=payload,
                request_id=request_id,
            )
        except Exception:
            logger.exception("Failed to record audit entry %s for list %s", action, list_id)

    transaction.on_commit(_write)
