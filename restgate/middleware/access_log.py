"""
RestGate — Access Log Middleware
==================================

What:  One access-log line per HTTP request.
How:   Times the downstream call and logs method, path, status, duration and
       response size on the "restgate.access" logger. Status and size are
       read from the http.response.start message; body messages pass through
       untouched so streamed responses keep streaming.
When:  Installed in development and production; omitted in test mode.

Line formats:
    production   GET /api/health-check 200 1.4 ms - 87
    development  GET /api/health-check 200 1.4 ms - 87 from 127.0.0.1 "curl/8.4.0"
"""

import logging
import time

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("restgate.access")


def level_for_status(status: int) -> int:
    """5xx -> ERROR, 4xx -> WARNING, everything else -> INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware:
    """
    Logs one line per request.

    Args:
        verbose: Also log client IP and user agent (development mode).
    """

    def __init__(self, app: ASGIApp, verbose: bool = False):
        self.app = app
        self.verbose = verbose

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        # Stays 500 if the app raises before starting a response
        status = 500
        content_length = "-"

        async def send_wrapper(message: Message) -> None:
            nonlocal status, content_length
            if message["type"] == "http.response.start":
                status = message["status"]
                content_length = Headers(raw=message.get("headers", [])).get("content-length", "-")
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._log(scope, status, duration_ms, content_length)

    def _log(self, scope: Scope, status: int, duration_ms: float, content_length: str) -> None:
        method = scope["method"]
        path = scope["path"]

        if self.verbose:
            # client is None under some test transports
            client = scope.get("client")
            client_ip = client[0] if client else "unknown"
            user_agent = Headers(scope=scope).get("user-agent", "-")
            logger.log(
                level_for_status(status),
                '%s %s %d %.1f ms - %s from %s "%s"',
                method,
                path,
                status,
                duration_ms,
                content_length,
                client_ip,
                user_agent,
            )
        else:
            logger.log(
                level_for_status(status),
                "%s %s %d %.1f ms - %s",
                method,
                path,
                status,
                duration_ms,
                content_length,
            )
