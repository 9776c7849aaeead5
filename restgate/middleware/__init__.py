# Middleware package init
"""
RestGate — Middleware Package
===============================

What:  The stages of the request pipeline that wrap route dispatch.

Middleware Chain (outermost first, see restgate.pipeline.build_middleware):
    Request → [GZip] → [Method Override] → [Access Log] → [CORS]
            → [Security Headers] → [Audit Log] → [Error Normalization]
            → Router (/api, then not-found)

    Access Log and Audit Log are left out in test mode.

The order is reversed for responses, so every response (error responses
included) passes through the audit log, security headers, CORS, access log
and compression on its way out.
"""

from restgate.middleware.access_log import AccessLogMiddleware
from restgate.middleware.audit_log import AuditLogMiddleware
from restgate.middleware.errors import ErrorNormalizationMiddleware
from restgate.middleware.method_override import MethodOverrideMiddleware
from restgate.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "AccessLogMiddleware",
    "AuditLogMiddleware",
    "ErrorNormalizationMiddleware",
    "MethodOverrideMiddleware",
    "SecurityHeadersMiddleware",
]
