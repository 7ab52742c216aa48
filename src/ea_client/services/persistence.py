"""Periodic snapshot flushing for volatile stores."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class SnapshotFlusher:
    """Run ``flush`` every ``interval_seconds`` in a background task.

    Request handlers never wait on it. ``stop`` cancels the task and
    performs one last flush.
    """

    flush: Callable[[], None]
    interval_seconds: float
    _task: asyncio.Task[None] | None = field(default=None, init=False)

    def start(self) -> None:
        """Start the background loop on the running event loop."""
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the loop and flush once more."""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self._flush_once()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self._flush_once()

    def _flush_once(self) -> None:
        try:
            self.flush()
        except Exception:
            logger.exception("Snapshot flush failed")
