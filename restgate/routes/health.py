"""
RestGate — Health Check Route
===============================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   Returns a static "OK" status with version, running mode and uptime.
Who:   Called by container health checks, load balancers and monitoring.
"""

import time

from fastapi import APIRouter, Request

from restgate import __version__
from restgate.schemas.responses import ErrorResponse, HealthResponse

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health-check",
    response_model=HealthResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Report that the process is serving requests."""
    settings = request.app.state.settings
    return HealthResponse(
        status="OK",
        version=__version__,
        environment=settings.environment.value,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
