"""
Request observability middleware.

`RequestIDLogMiddleware`
    * Reads `X-Request-ID` (or generates one) and reflects it in the response.
    * Binds the id to `core.logging.request_id_var` for the duration of the
      request, so service logs and audit rows share it, then restores the
      previous value.
    * Logs one structured line per request to `wishlist.request`, at WARNING
      for 5xx responses and INFO otherwise.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable

from django.http import HttpRequest, HttpResponse

from .logging import request_id_var

logger = logging.getLogger("wishlist.request")

# Client ids are echoed into headers and logs; accept only simple tokens.
_ALLOWED_CHARS = re.compile(r"^[A-Za-z0-9._\-]{1,64}$")


def _coerce_request_id(raw: str | None) -> str:
    if raw and _ALLOWED_CHARS.match(raw):
        return raw
    return uuid.uuid4().hex


class RequestIDLogMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        rid = _coerce_request_id(request.headers.get("X-Request-ID"))
        request.request_id = rid
        token = request_id_var.set(rid)

        start = time.perf_counter()
        try:
            response = self.get_response(request)
            duration_ms = int((time.perf_counter() - start) * 1000)
            response.headers["X-Request-ID"] = rid

            # Only read the id of an already-resolved user; never trigger a query here.
            user = getattr(request, "user", None)
            user_id = getattr(user, "id", None) if getattr(user, "is_authenticated", False) else None

            status = getattr(response, "status_code", 0)
            logger.log(
                logging.WARNING if status >= 500 else logging.INFO,
                "request",
                extra={
                    "request_id": rid,
                    "method": request.method,
                    "path": request.path,
                    "status": status,
                    "user_id": user_id,
                    "duration_ms": duration_ms,
                },
            )
            return response
        finally:
            request_id_var.reset(token)
