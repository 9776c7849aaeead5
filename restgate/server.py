"""
RestGate — Server Entry Point
===============================

What:  Runs the application under uvicorn on the configured host and port.
Who:   The `restgate` console script, or `python -m restgate`.
"""

from typing import Optional

import uvicorn

from restgate.config import Settings
from restgate.main import create_app


def run(settings: Optional[Settings] = None) -> None:
    """Serve the app until interrupted."""
    if settings is None:
        settings = Settings()

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        # No Server header: the stack is not advertised to clients
        server_header=False,
        access_log=False,
    )
