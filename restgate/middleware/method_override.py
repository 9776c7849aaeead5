"""
RestGate — Method Override Middleware
=======================================

What:  Lets clients that can only send GET/POST use PUT, PATCH, DELETE, ...
How:   A POST request carrying the override header (X-HTTP-Method-Override
       by default) with a known HTTP method has its scope method rewritten
       before routing. The original method is kept in
       scope["original_method"].

Example:
    POST /api/items/1
    X-HTTP-Method-Override: DELETE
    → routed as DELETE /api/items/1
"""

import logging
from typing import Iterable

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"}
)


class MethodOverrideMiddleware:
    """
    Rewrites the request method from an override header.

    Args:
        header:  Name of the header holding the replacement method.
        methods: Original methods that may be overridden (POST only by default).
    """

    def __init__(
        self,
        app: ASGIApp,
        header: str = "X-HTTP-Method-Override",
        methods: Iterable[str] = ("POST",),
    ):
        self.app = app
        self.header = header
        self.methods = frozenset(m.upper() for m in methods)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] in self.methods:
            override = Headers(scope=scope).get(self.header, "").strip().upper()
            if override in HTTP_METHODS and override != scope["method"]:
                logger.debug("Overriding %s with %s for %s", scope["method"], override, scope["path"])
                scope = dict(scope)
                scope["original_method"] = scope["method"]
                scope["method"] = override
        await self.app(scope, receive, send)
