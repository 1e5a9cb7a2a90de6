"""FastAPI application exposing the tracker to UI collaborators and the host."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .config import TrackerSettings
from .engine import TrackerEngine
from .host import Host
from .idle_source import create_local_idle_poller
from .models import (
    IdleState,
    IdleStateChanged,
    TabActivated,
    TabUpdated,
    WindowFocusChanged,
)
from .paths import resolve_db_path
from .router import PromptResponsePayload, SetProjectRequest

logger = logging.getLogger(__name__)


class TabActivatedPayload(BaseModel):
    tab_id: int
    window_id: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class TabUpdatedPayload(BaseModel):
    tab_id: int
    is_active: bool = True

    model_config = ConfigDict(extra="forbid")


class WindowFocusPayload(BaseModel):
    window_id: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class IdleStatePayload(BaseModel):
    state: Literal["active", "idle", "locked"]

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    host: Optional[Host] = None,
    local_idle: bool = False,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_db_path = resolve_db_path(db_path)
    resolved_settings = settings or TrackerSettings()
    engine = TrackerEngine(resolved_db_path, resolved_settings, host=host)

    app = FastAPI(title="Project Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_path = resolved_db_path
    app.state.engine = engine
    app.state.idle_task = None

    @app.on_event("startup")
    async def _startup() -> None:
        await engine.start()
        if local_idle:
            poller = create_local_idle_poller(
                engine.post_event,
                threshold_ms=resolved_settings.idle_threshold_ms,
                poll_seconds=resolved_settings.poll_interval.total_seconds(),
            )
            app.state.idle_task = asyncio.create_task(poller.run())
            logger.info("Local idle detection enabled.")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        idle_task = app.state.idle_task
        if idle_task is not None:
            idle_task.cancel()
            await asyncio.gather(idle_task, return_exceptions=True)
        await engine.stop()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        return {
            "engine_running": request.app.state.engine.is_running,
            "database_path": str(request.app.state.db_path),
            "idle_seconds": resolved_settings.idle_threshold.total_seconds(),
            "heartbeat_seconds": resolved_settings.heartbeat_interval.total_seconds(),
        }

    @app.post("/api/messages")
    async def messages(message: Dict[str, Any]) -> Dict[str, Any]:
        return await engine.request(message)

    @app.get("/api/state")
    async def get_all_app_state() -> Dict[str, Any]:
        return await engine.request({"action": "getAllAppState"})

    @app.get("/api/projects")
    async def get_available_projects() -> Dict[str, Any]:
        return await engine.request({"action": "getAvailableProjects"})

    @app.post("/api/project")
    async def set_project(payload: SetProjectRequest) -> Dict[str, Any]:
        return await engine.request({"action": "setProject", "project": payload.project})

    @app.get("/api/prompt")
    def prompt_status() -> Dict[str, Any]:
        return engine.prompt_status()

    @app.post("/api/prompt-response")
    async def prompt_response(payload: PromptResponsePayload) -> Dict[str, Any]:
        return await engine.request(
            {"action": "handlePromptResponse", **payload.model_dump(by_alias=True)}
        )

    @app.post("/api/reset")
    async def reset_all_data() -> Dict[str, Any]:
        return await engine.request({"action": "resetAllData"})

    @app.post("/api/signals/tab-activated")
    async def tab_activated(payload: TabActivatedPayload) -> Dict[str, Any]:
        await engine.submit_event(TabActivated(payload.tab_id, payload.window_id))
        return {"status": "ok"}

    @app.post("/api/signals/tab-updated")
    async def tab_updated(payload: TabUpdatedPayload) -> Dict[str, Any]:
        await engine.submit_event(TabUpdated(payload.tab_id, payload.is_active))
        return {"status": "ok"}

    @app.post("/api/signals/window-focus")
    async def window_focus(payload: WindowFocusPayload) -> Dict[str, Any]:
        await engine.submit_event(WindowFocusChanged(payload.window_id))
        return {"status": "ok"}

    @app.post("/api/signals/idle-state")
    async def idle_state(payload: IdleStatePayload) -> Dict[str, Any]:
        await engine.submit_event(IdleStateChanged(IdleState(payload.state)))
        return {"status": "ok"}

    return app
