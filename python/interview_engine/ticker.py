"""
Periodic deadline ticker.

Runs ``InterviewEngine.tick()`` on a fixed cadence inside an asyncio task.
One ticker per engine; ``stop()`` cancels it. The engine's deadline latch
guarantees at most one auto-submit per question however often it ticks.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .engine import InterviewEngine

logger = logging.getLogger(__name__)


class QuestionTicker:
    """
    asyncio driver for deadline polling.

    Usage:
        ticker = QuestionTicker(engine, interval=1.0)
        ticker.start()
        ...
        await ticker.stop()
    """

    def __init__(
        self,
        engine: "InterviewEngine",
        interval: float = 1.0,
        on_fire: Optional[Callable[[], None]] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive. Got: {interval}")
        self._engine = engine
        self._interval = interval
        self._on_fire = on_fire
        self._task: Optional[asyncio.Task[None]] = None
        self.fired = 0
        self.errors = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking on the running event loop (no-op if already running)."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug("Ticker started (interval=%.2fs)", self._interval)

    async def stop(self) -> None:
        """Cancel the ticker task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Ticker stopped after %d auto-submits", self.fired)

    async def _run(self) -> None:
        while True:
            try:
                if self._engine.tick():
                    self.fired += 1
                    if self._on_fire is not None:
                        self._on_fire()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.errors += 1
                logger.error("Deadline tick failed: %s", e, exc_info=True)
            await asyncio.sleep(self._interval)
