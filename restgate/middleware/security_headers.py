"""
Secure HTTP headers middleware.

Adds security-related headers to every response:
- X-Permitted-Cross-Domain-Policies
- X-XSS-Protection
- X-Content-Type-Options
- X-Frame-Options
- X-Download-Options

and strips X-Powered-By. No business logic.

Pure ASGI: only the http.response.start message is touched, body messages
pass through unchanged.
"""

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

SECURE_HEADERS = {
    "X-Permitted-Cross-Domain-Policies": "none",
    # Turns legacy browser XSS auditors off
    "X-XSS-Protection": "0",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Download-Options": "noopen",
}

REMOVED_HEADERS = ("X-Powered-By",)


class SecurityHeadersMiddleware:
    """Adds SECURE_HEADERS to every response and removes REMOVED_HEADERS."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for header_name, header_value in SECURE_HEADERS.items():
                    headers[header_name] = header_value
                for header_name in REMOVED_HEADERS:
                    if header_name in headers:
                        del headers[header_name]
            await send(message)

        await self.app(scope, receive, send_with_headers)
