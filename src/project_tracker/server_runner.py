"""Helpers to launch the local tracker service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import uvicorn

from .config import TrackerSettings
from .host import SignalHost
from .paths import resolve_db_path
from .webapp import create_app


def run_server(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    prompt_url: Optional[str] = None,
    local_idle: bool = False,
    log_level: str = "info",
) -> None:
    """Start the FastAPI service that hosts the tracking engine."""
    app = create_app(
        db_path=resolve_db_path(db_path),
        settings=settings or TrackerSettings(),
        host=SignalHost(prompt_url=prompt_url),
        local_idle=local_idle,
    )
    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)
