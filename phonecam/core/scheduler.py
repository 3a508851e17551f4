"""
Periodic timer for cooperative scan scheduling.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """
    Runs an async callback on a fixed cadence.

    Ticks never overlap: the next interval starts counting once the previous
    tick has finished. The interval is read before every wait so it can be
    changed while running.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[None]],
        interval: Callable[[], float],
        name: str = "timer",
    ):
        self.callback = callback
        self.interval = interval
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=self.name)

    async def stop(self):
        """Cancel the pending tick and wait for the loop to exit."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval())
            try:
                await self.callback()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # A failed tick only skips that tick
                logger.error(f"{self.name} tick error: {e}")
