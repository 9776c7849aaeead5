"""
RestGate — FastAPI Application Factory
========================================

What:  Creates the FastAPI application: middleware pipeline, API routes,
       not-found stage and uniform error handling.
How:   Factory pattern: create_app(settings) returns a configured FastAPI
       instance. Settings are built once and passed in explicitly.
Who:   Called by uvicorn (uvicorn restgate.main:app), by restgate.server.run
       and by the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                         FastAPI App                          │
    │                                                              │
    │  Middleware Chain (restgate.pipeline.build_middleware):      │
    │  GZip → MethodOverride → AccessLog → CORS → SecurityHeaders  │
    │       → AuditLog → ErrorNormalization                        │
    │                                                              │
    │  Routes:                                                     │
    │  ┌──────────────────────────┐ ┌───────────────────────────┐  │
    │  │ /api/* (api_router)      │ │ /{anything} → 404 stage   │  │
    │  └──────────────────────────┘ └───────────────────────────┘  │
    │                                                              │
    │  Errors:                                                     │
    │  any failure → normalize_error → render_error (JSON)         │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log mode and listen address.
    Shutdown: log shutdown.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from restgate import __version__
from restgate.config import Settings
from restgate.errors import handle_error
from restgate.exceptions import NotFoundError, RestGateError
from restgate.middleware.method_override import HTTP_METHODS
from restgate.pipeline import build_middleware
from restgate.routes import api_router as default_api_router

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Loggers:
        restgate.access  one line per request
        restgate.audit   structured request/response records
        restgate.errors  error diagnostics from the terminal responder
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # The access log middleware replaces uvicorn's own access lines
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup; log startup and shutdown."""
    settings: Settings = app.state.settings

    setup_logging(settings)
    logger.info("RestGate %s starting in %s mode", __version__, settings.environment.value)
    logger.info(
        "API mounted at %s, listening on http://%s:%d",
        settings.api_prefix,
        settings.host,
        settings.port,
    )

    yield

    logger.info("RestGate shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Route framework-raised failures through the uniform error responder.

    Handler coverage:
        RequestValidationError  → 400, joined field messages
        HTTPException           → its status; detail shown for 4xx
        RestGateError           → APIError / ValidationFailure as raised

    Every other exception propagates to ErrorNormalizationMiddleware, which
    uses the same normalize_error/render_error pair.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return handle_error(request, exc, settings)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return handle_error(request, exc, settings)

    @app.exception_handler(RestGateError)
    async def handle_restgate_error(request: Request, exc: RestGateError) -> JSONResponse:
        return handle_error(request, exc, settings)


# ══════════════════════════════════════════════════════════════════════════
# Not-Found Stage
# ══════════════════════════════════════════════════════════════════════════

def register_not_found(app: FastAPI) -> None:
    """
    Catch-all route registered after every other route.

    Any request no earlier route fully matched (unknown path, or a known
    path with an unsupported method) ends here as a 404 APIError.

    Because this route matches every path, Starlette's redirect_slashes
    never gets a chance to run: "/api/health-check/" is answered with the
    404 rather than redirected to "/api/health-check".
    """

    @app.api_route(
        "/{path:path}",
        methods=sorted(HTTP_METHODS),
        include_in_schema=False,
    )
    async def not_found(path: str) -> None:
        raise NotFoundError()


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    api_router: Optional[APIRouter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:   Immutable configuration; read from the environment if
                    omitted.
        api_router: Router mounted under settings.api_prefix; defaults to
                    the bundled routes.

    Returns:
        Fully configured FastAPI instance ready to receive requests.
    """
    if settings is None:
        settings = Settings()
    if api_router is None:
        api_router = default_api_router

    app = FastAPI(
        title="RestGate API",
        description="JSON API server with a uniform error pipeline.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        middleware=build_middleware(settings),
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, settings)

    # ── Register Routes ───────────────────────────────────────────────────
    # Order matters: the not-found catch-all must come last
    app.include_router(api_router, prefix=settings.api_prefix)
    register_not_found(app)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `restgate.main:app` to be importable
app = create_app()
