"""ASGI middleware for Prometheus metrics.

This module provides middleware for tracking HTTP request metrics.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from .metrics import HTTP_REQUEST_DURATION_SECONDS, HTTP_REQUESTS_TOTAL

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Message, Receive, Scope, Send


def _endpoint_label(scope: Scope) -> str:
    """Route template for the request, or its sanitized path.

    Using the template keeps label cardinality bounded.
    """
    template = scope.get("path_template")
    if template:
        return str(template)
    path = scope.get("path", "/")
    parts = path.rstrip("/").split("/")
    if parts and len(parts[-1]) > 20:
        parts[-1] = "{identifier}"
        path = "/".join(parts)
    return path


def metrics_middleware(app: ASGIApp) -> ASGIApp:
    """Wrap an ASGI app to track request counts and durations.

    Tracks:
    - Total requests by method, endpoint and status code
    - Request duration by method and endpoint
    """

    async def middleware(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        start_time = time.perf_counter()
        status = "500"

        async def send_wrapper(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = str(message["status"])
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start_time
            endpoint = _endpoint_label(scope)
            method = scope.get("method", "GET")

            HTTP_REQUEST_DURATION_SECONDS.labels(method=method, endpoint=endpoint).observe(
                duration
            )
            HTTP_REQUESTS_TOTAL.labels(method=method, endpoint=endpoint, status=status).inc()

    return middleware
