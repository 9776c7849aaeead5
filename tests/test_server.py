"""
RestGate — Server Entry Point Tests
=====================================

What:  run() hands the configured app, host and port to uvicorn.
How:   uvicorn.run is patched; no server is started.
"""

from unittest.mock import patch

from fastapi import FastAPI

from restgate.config import Environment, Settings
from restgate.server import run


class TestRun:

    def test_uses_configured_address(self):
        settings = Settings(environment=Environment.PRODUCTION, host="127.0.0.1", port=4000, log_level="warning")

        with patch("restgate.server.uvicorn.run") as mock_run:
            run(settings)

        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert isinstance(args[0], FastAPI)
        assert args[0].state.settings is settings
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 4000
        assert kwargs["log_level"] == "warning"
        assert kwargs["server_header"] is False
