"""Request logging middleware."""

from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Path parameters that name the graph object a request is about
SUBJECT_PARAMS = ("page_name", "concept", "entity", "block_uuid", "property_key")


def request_subject(request: Request) -> str | None:
    """The page, concept, entity, block or property a routed request targets."""
    params = request.scope.get("path_params") or {}
    for name in SUBJECT_PARAMS:
        if name in params:
            return f"{name}={params[name]}"
    return None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with the graph object it targets and its outcome.

    Error responses from the Logseq exception handlers are logged at warning
    so an unreachable or failing Logseq instance stands out.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed = (time.monotonic() - start) * 1000

        subject = request_subject(request)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s%s -> %d (%.1fms)",
            request.method,
            request.url.path,
            f" [{subject}]" if subject else "",
            response.status_code,
            elapsed,
        )
        return response
