"""The tracking engine: one inbox, one consumer, a heartbeat."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from .accumulator import TimeAccumulator
from .config import TrackerSettings
from .host import Host, SignalHost
from .models import ActivityEvent, now_ms
from .monitor import ActivityMonitor
from .prompt import IdlePromptCoordinator
from .router import MessageRouter
from .store import SessionStash, StateStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Job:
    run: Callable[[], Awaitable[Any]]
    future: Optional[asyncio.Future]
    label: str


class TrackerEngine:
    """Serializes host signals and UI requests through a single asyncio queue.

    Each job runs to completion, host queries included, before the next one
    is taken. Requests and signals are therefore totally ordered: a prompt
    response queued after a ``setProject`` overrides its current project.
    """

    def __init__(
        self,
        db_path: Path,
        settings: Optional[TrackerSettings] = None,
        *,
        host: Optional[Host] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self.clock = clock
        self.host = host if host is not None else SignalHost()
        self.store = StateStore(db_path)
        self.store.load()
        self.stash = SessionStash()
        self.accumulator = TimeAccumulator(
            self.store, threshold_ms=self.settings.noise_threshold_ms, now=clock()
        )
        self.monitor = ActivityMonitor(
            self.store, self.accumulator, self.stash, self.host, clock
        )
        self.coordinator = IdlePromptCoordinator(
            self.store,
            self.accumulator,
            self.stash,
            self.monitor,
            self.host,
            clock,
            timeout_ms=self.settings.prompt_timeout_ms,
        )
        self.monitor.on_idle_end = self.coordinator.open_prompt
        self.router = MessageRouter(
            self.store, self.accumulator, self.monitor, self.coordinator, clock
        )
        self._queue: Optional[asyncio.Queue[_Job]] = None
        self._tasks: list[asyncio.Task] = []

    @property
    def is_running(self) -> bool:
        return bool(self._tasks) and not any(task.done() for task in self._tasks)

    async def start(self) -> None:
        if self.is_running:
            return
        self._queue = asyncio.Queue()
        self._tasks = [
            asyncio.create_task(self._consume(), name="tracker-inbox"),
            asyncio.create_task(self._heartbeat(), name="tracker-heartbeat"),
        ]
        logger.info("Tracking engine started; state in %s", self.store.db_path)

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        try:
            self.store.save()
        finally:
            self.store.close()
            logger.info("Tracking engine stopped.")

    async def submit_event(self, event: ActivityEvent) -> None:
        """Enqueue a host signal and wait until it has been applied."""
        await self._submit(lambda: self._apply_event(event), type(event).__name__)

    def post_event(self, event: ActivityEvent) -> None:
        """Enqueue a host signal without waiting."""
        self._enqueue(_Job(lambda: self._apply_event(event), None, type(event).__name__))

    async def request(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._submit(
            lambda: self.router.dispatch(message), str(message.get("action"))
        )

    def prompt_status(self) -> Dict[str, Any]:
        return {
            "open": self.coordinator.is_open,
            "idleDuration": self.stash.peek(),
            "availableProjects": sorted(self.store.state.available_projects),
        }

    async def _apply_event(self, event: ActivityEvent) -> None:
        observe = getattr(self.host, "observe", None)
        if observe is not None:
            observe(event)
        await self.monitor.handle(event)

    async def _submit(self, run: Callable[[], Awaitable[Any]], label: str) -> Any:
        future = asyncio.get_running_loop().create_future()
        self._enqueue(_Job(run, future, label))
        return await future

    def _enqueue(self, job: _Job) -> None:
        if self._queue is None:
            raise RuntimeError("Tracking engine is not running.")
        self._queue.put_nowait(job)

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                result = await job.run()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception("Job %s failed.", job.label)
                if job.future is not None and not job.future.done():
                    job.future.set_exception(exc)
            else:
                if job.future is not None and not job.future.done():
                    job.future.set_result(result)
            finally:
                self._queue.task_done()

    async def _heartbeat(self) -> None:
        interval = self.settings.heartbeat_interval.total_seconds()
        while True:
            await asyncio.sleep(interval)
            self._enqueue(_Job(self._tick, None, "heartbeat"))

    async def _tick(self) -> None:
        await self.coordinator.expire_if_abandoned(self.clock())
        try:
            self.store.save()
        except sqlite3.Error:
            logger.exception("Heartbeat save failed; retrying at the next tick.")
