"""Helpers to launch the local HTTP API."""

from __future__ import annotations

import logging
from typing import Optional

import uvicorn

from .config import IntervalConfig
from .webapp import create_app


def run_server(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    config: Optional[IntervalConfig] = None,
    log_level: str = "info",
) -> None:
    """Serve the FastAPI app until interrupted."""
    app = create_app(config=config)
    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)
