"""Coalescing runner for view refreshes.

At most one run is in flight. A request that arrives while a run executes
sets a single rerun flag; however many requests arrive, exactly one
follow-up run happens after the current one. A request that arrives while a
run is scheduled but has not started yet is absorbed by that run.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from ..utils.logging import get_logger

logger = get_logger(__name__)


class SingleSlotRunner:
    """Serialize runs of ``task`` with one pending slot.

    Args:
        task: Coroutine function to run
        settle_delay: Seconds to sleep before each run (responsiveness only)
        name: Label used in log events
    """

    def __init__(
        self,
        task: Callable[[], Awaitable[Any]],
        settle_delay: float = 0.0,
        name: str = "refresh",
    ):
        self._task_fn = task
        self.settle_delay = settle_delay
        self.name = name
        self._current: asyncio.Task[None] | None = None
        self._executing = False
        self._rerun = False
        self._closed = False
        self.runs = 0
        self.last_error: BaseException | None = None

    @property
    def busy(self) -> bool:
        return self._current is not None and not self._current.done()

    @property
    def rerun_pending(self) -> bool:
        return self._rerun

    @property
    def closed(self) -> bool:
        return self._closed

    def request(self) -> asyncio.Task[None] | None:
        """Ask for a run. Must be called from inside the event loop."""
        if self._closed:
            return None
        if self.busy:
            if self._executing:
                self._rerun = True
            return self._current
        self._current = asyncio.get_running_loop().create_task(self._run_loop())
        return self._current

    async def _run_loop(self) -> None:
        while True:
            self._rerun = False
            if self.settle_delay > 0:
                await asyncio.sleep(self.settle_delay)
            self._executing = True
            try:
                await self._task_fn()
                self.last_error = None
            except Exception as e:
                self.last_error = e
                logger.exception("run_failed", runner=self.name, error=str(e))
            finally:
                self._executing = False
                self.runs += 1
            if not self._rerun or self._closed:
                break
            logger.debug("run_coalesced", runner=self.name)
        self._rerun = False

    async def wait(self) -> None:
        """Wait until no run is scheduled or executing."""
        while self._current is not None and not self._current.done():
            try:
                await asyncio.shield(self._current)
            except asyncio.CancelledError:
                if not self._current.cancelled():
                    raise

    def close(self) -> None:
        """Stop accepting requests and drop any run that has not started."""
        self._closed = True
        self._rerun = False
        if self._current is not None and not self._current.done() and not self._executing:
            self._current.cancel()
            logger.debug("run_cancelled", runner=self.name)
