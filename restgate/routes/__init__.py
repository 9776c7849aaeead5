# Routes package init
"""
RestGate — API Routes Package
===============================

What:  The route-handling subsystem mounted under the API prefix (/api).

Route Inventory:
    - health.py:  GET /api/health-check   (liveness check)

Applications add their own routers to `api_router`, or pass a different
router to create_app(api_router=...).
"""

from fastapi import APIRouter

from restgate.routes import health


def build_api_router() -> APIRouter:
    """Router with every bundled route, to be mounted under the API prefix."""
    router = APIRouter()
    router.include_router(health.router)
    return router


api_router = build_api_router()
