from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from vibe_planner.actions import SetChatResults
from vibe_planner.config import DEFAULT_RECONCILE_INTERVAL
from vibe_planner.logging_utils import get_logger
from vibe_planner.sync.buffer import StreamingResultBuffer

logger = get_logger(__name__)


class ReconciliationScheduler:
    """Periodically copies the buffer's latest result set into the store.

    Each tick compares the buffer version with the last one consumed and
    dispatches a single ``SET_CHAT_RESULTS`` only when it advanced, so the
    number of store updates per turn is bounded by the tick rate rather than
    by how often the chat widget re-renders.
    """

    def __init__(
        self,
        buffer: StreamingResultBuffer,
        dispatch: Callable[[Any], Any],
        *,
        interval: float = DEFAULT_RECONCILE_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("reconcile interval must be positive")
        self.buffer = buffer
        self.interval = interval
        self._dispatch = dispatch
        self._last_version = buffer.version
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def last_version(self) -> int:
        return self._last_version

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> bool:
        """Run one reconciliation step; returns ``True`` when it dispatched."""
        if self._stopped:
            return False
        version = self.buffer.version
        if version <= self._last_version:
            return False
        cities = self.buffer.snapshot()
        self._last_version = version
        logger.debug("Reconciling %d buffered result(s) at version %d", len(cities), version)
        self._dispatch(SetChatResults(cities=cities))
        return True

    def start(self) -> asyncio.Task:
        """Schedule the periodic loop on the running event loop."""
        if self.running:
            return self._task  # type: ignore[return-value]
        self._stopped = False
        # results buffered while stopped had no consumer; skip them
        self._last_version = self.buffer.version
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Reconciliation scheduler started (interval %.2fs)", self.interval)
        return self._task

    def stop(self) -> None:
        """Tear the loop down. Whatever is still buffered is discarded."""
        self._stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("Reconciliation scheduler stopped")
        self._task = None

    async def _run(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.interval)
            try:
                self.tick()
            except Exception:
                logger.warning("Reconciliation tick failed", exc_info=True)
