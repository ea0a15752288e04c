"""
Periodic removal of idle sessions.
"""

import asyncio
import time
from typing import Callable, Optional

import structlog

from contract_assistant.sessions.store import SessionStore

logger = structlog.get_logger(__name__)


class SessionSweeper:
    """
    Background task calling `store.sweep_expired(now)` every `interval_seconds`.

    Started on application startup and stopped on shutdown. A failing sweep is
    logged and the loop keeps running.
    """

    def __init__(
        self,
        store: SessionStore,
        interval_seconds: float = 3600,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> int:
        try:
            return await self.store.sweep_expired(self._clock())
        except Exception as e:
            logger.error("Session sweep failed", error=str(e), error_type=type(e).__name__, exc_info=True)
            return 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.sweep_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-sweeper")
        logger.info("Session sweeper started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session sweeper stopped")
