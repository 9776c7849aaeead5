"""
RestGate — Package Initializer
================================

What: JSON API server skeleton: an ordered middleware pipeline (compression,
      method override, access log, CORS, security headers, audit log) in
      front of an /api router, ending in one uniform error responder.

Layout:
    config.py        Settings (pydantic-settings), Environment enum
    exceptions.py    APIError, ValidationFailure, FailureKind
    errors.py        normalize_error / render_error
    pipeline.py      build_middleware(settings)
    middleware/      pipeline stages
    dependencies.py  decoded_body request-body dependency
    routes/          router mounted under /api
    main.py          create_app() factory and the uvicorn `app`
    server.py        uvicorn entry point
"""

__version__ = "1.0.0"
