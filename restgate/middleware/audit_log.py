"""
RestGate — Audit Log Middleware
=================================

What:  Structured request/response record for every HTTP request.
How:   Logs "HTTP {method} {url} {status} {ms}ms" on the "restgate.audit"
       logger and attaches request/response metadata (headers, query and,
       optionally, bodies) through the record's `extra` fields `req`, `res`
       and `response_time_ms`.
When:  Installed in development and production; omitted in test mode.

Bodies are captured as they flow through `receive` and `send`, never
buffered ahead of the application or the client: each chunk is forwarded
as soon as it arrives and at most MAX_LOGGED_BODY + 1 bytes per direction
are kept for the record. A request body the application never reads is
not recorded.

Record layout (extra):
    req: {"method", "url", "headers", "query", "body"?}
    res: {"status", "headers", "body"?}
    response_time_ms: float
"""

import json
import logging
import time
from typing import Any, Dict, Optional

from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from restgate.middleware.access_log import level_for_status

logger = logging.getLogger("restgate.audit")

# Bodies longer than this are truncated in the record
MAX_LOGGED_BODY = 4096

_TEXT_MEDIA_TYPES = (
    "application/json",
    "application/x-www-form-urlencoded",
    "text/",
)


def loggable_body(raw: bytes, content_type: str, size: Optional[int] = None) -> Any:
    """
    Render a body for the audit record.

    JSON is decoded, other text is returned as (truncated) str, binary
    payloads are summarized by size. `size` is the full body length when
    `raw` holds only its first bytes.
    """
    if not raw:
        return None
    if size is None:
        size = len(raw)
    media_type = content_type.split(";")[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            if size <= MAX_LOGGED_BODY:
                return json.loads(raw)
        except ValueError:
            pass
    if media_type.endswith("+json") or media_type.startswith(_TEXT_MEDIA_TYPES):
        text = raw.decode("utf-8", errors="replace")
        if size > MAX_LOGGED_BODY or len(text) > MAX_LOGGED_BODY:
            return text[:MAX_LOGGED_BODY] + "...(truncated)"
        return text
    return f"<{size} bytes>"


def request_target(request: Request) -> str:
    """Path plus query string, as sent on the request line."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class _BodyCapture:
    """First MAX_LOGGED_BODY + 1 bytes of a body plus its total size."""

    def __init__(self):
        self.head = bytearray()
        self.size = 0

    def feed(self, chunk: bytes) -> None:
        self.size += len(chunk)
        room = MAX_LOGGED_BODY + 1 - len(self.head)
        if room > 0:
            self.head.extend(chunk[:room])

    def render(self, content_type: str) -> Any:
        return loggable_body(bytes(self.head), content_type, size=self.size)


class AuditLogMiddleware:
    """
    Writes a structured audit record per request.

    Args:
        log_bodies: Include request and response bodies in the record.
    """

    def __init__(self, app: ASGIApp, log_bodies: bool = True):
        self.app = app
        self.log_bodies = log_bodies

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request = Request(scope)
        request_body = _BodyCapture()
        response_body = _BodyCapture()
        response_start: Dict[str, Any] = {"status": 500, "headers": Headers()}

        async def receive_wrapper() -> Message:
            message = await receive()
            if self.log_bodies and message["type"] == "http.request":
                request_body.feed(message.get("body", b""))
            return message

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_start["status"] = message["status"]
                response_start["headers"] = Headers(raw=message.get("headers", []))
            elif self.log_bodies and message["type"] == "http.response.body":
                response_body.feed(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._log(request, request_body, response_start, response_body, duration_ms)

    def _log(
        self,
        request: Request,
        request_body: _BodyCapture,
        response_start: Dict[str, Any],
        response_body: _BodyCapture,
        duration_ms: float,
    ) -> None:
        status = response_start["status"]
        response_headers = response_start["headers"]

        req: Dict[str, Any] = {
            "method": request.method,
            "url": str(request.url),
            "headers": dict(request.headers),
            "query": dict(request.query_params),
        }
        res: Dict[str, Any] = {
            "status": status,
            "headers": dict(response_headers),
        }
        if self.log_bodies:
            req["body"] = request_body.render(request.headers.get("content-type", ""))
            res["body"] = response_body.render(response_headers.get("content-type", ""))

        logger.log(
            level_for_status(status),
            "HTTP %s %s %d %.0fms",
            request.method,
            request_target(request),
            status,
            duration_ms,
            extra={
                "req": req,
                "res": res,
                "response_time_ms": round(duration_ms, 2),
            },
        )
