"""
Request-scoped correlation for log records.

- `request_id_var` holds the current request id; `RequestIDLogMiddleware`
  binds it for the lifetime of each request and resets it afterwards.
- `current_request_id()` lets non-logging code (the audit trail) stamp rows
  with the same id that appears in the logs.
- `RequestIDFilter` copies the id onto every `LogRecord` so formatters using
  `%(request_id)s` never break, including in management commands where the
  value is the placeholder `"-"`.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar

NO_REQUEST_ID = "-"

request_id_var: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def current_request_id() -> str:
    """Return the bound request id, or an empty string outside a request."""
    rid = request_id_var.get()
    return "" if rid == NO_REQUEST_ID else rid


class RequestIDFilter(logging.Filter):
    """Inject `request_id` on records that do not already carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True
