"""
RestGate — Error Normalization Middleware
===========================================

What:  Boundary that catches any exception escaping route dispatch or an
       inner stage and turns it into the uniform JSON error response.
How:   Runs the inner app and, if it raises before the response has
       started, hands the exception to restgate.errors.handle_error and
       sends the result. Framework exceptions already handled by FastAPI's
       exception handlers (see main.register_exception_handlers) never reach
       this middleware; both paths share the same code.
When:  Innermost middleware, so error responses still pass through the
       audit log, security headers, CORS, access log and compression stages.
"""

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from restgate.config import Settings
from restgate.errors import handle_error


class ErrorNormalizationMiddleware:
    def __init__(self, app: ASGIApp, settings: Settings):
        self.app = app
        self.settings = settings

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            # Nothing can be sent once the status line is out
            if response_started:
                raise
            response = handle_error(Request(scope, receive), exc, self.settings)
            await response(scope, receive, send)
