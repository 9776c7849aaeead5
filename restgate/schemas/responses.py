"""
RestGate — Pydantic Response Schemas
======================================

What:  Pydantic models for the bodies the pipeline itself produces.
How:   The terminal responder serializes ErrorResponse; route handlers use
       the remaining models as response_model for OpenAPI generation.
"""

from typing import Any, Dict, Union

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Error Response Model — the wire contract of every error
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Body of every error response. Exactly two fields.

    Example (production):
        {"message": "Internal Server Error", "stack": {}}

    Example (development):
        {"message": "name: Field required", "stack": "Traceback (most recent call last): ..."}
    """
    message: str = Field(description="Error message if public, else the HTTP reason phrase")
    stack: Union[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Stack trace in development mode; an empty object otherwise",
    )


# ══════════════════════════════════════════════════════════════════════════
# Route Response Models
# ══════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    """Returned by GET /api/health-check."""
    status: str = Field(description="Always 'OK' while the process can serve requests")
    version: str = Field(description="Application version")
    environment: str = Field(description="Running mode: development, production or test")
    uptime_seconds: float = Field(description="Seconds since service started")
