"""
RestGate — Pipeline Builder
=============================

What:  Produces the ordered middleware list of the request pipeline.
How:   build_middleware(settings) returns Starlette Middleware entries,
       outermost first, ready for FastAPI(middleware=...).

Stage order:
    1. GZipMiddleware               compression negotiation
    2. MethodOverrideMiddleware     X-HTTP-Method-Override resolution
    3. AccessLogMiddleware          (development, production)
    4. CORSMiddleware               CORS headers / preflight
    5. SecurityHeadersMiddleware    security headers
    6. AuditLogMiddleware           (development, production)
    7. ErrorNormalizationMiddleware uniform error responses

Body decoding is done per route by FastAPI (JSON models) and by the
restgate.dependencies.decoded_body dependency (JSON, url-encoded, multipart).
"""

from typing import List

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from restgate.config import Settings
from restgate.middleware import (
    AccessLogMiddleware,
    AuditLogMiddleware,
    ErrorNormalizationMiddleware,
    MethodOverrideMiddleware,
    SecurityHeadersMiddleware,
)


def build_middleware(settings: Settings) -> List[Middleware]:
    """Ordered middleware stack for `settings`, outermost first."""
    origins = settings.cors_origins_list
    allow_any_origin = origins == ["*"]

    stack = [
        Middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size),
        Middleware(MethodOverrideMiddleware, header=settings.method_override_header),
    ]

    if not settings.is_test:
        stack.append(Middleware(AccessLogMiddleware, verbose=settings.is_development))

    stack.append(
        Middleware(
            CORSMiddleware,
            allow_origins=origins,
            # Credentials cannot be combined with a wildcard origin
            allow_credentials=not allow_any_origin,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    )
    stack.append(Middleware(SecurityHeadersMiddleware))

    if not settings.is_test:
        stack.append(Middleware(AuditLogMiddleware, log_bodies=settings.audit_log_bodies))

    stack.append(Middleware(ErrorNormalizationMiddleware, settings=settings))
    return stack
