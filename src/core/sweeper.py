"""Background expiry sweeper.

Abandoned confirmation flows would otherwise live until the process exits.
The sweeper runs on a fixed interval as an asyncio task and evicts whatever
its targets report as expired. Each target does its own short locked pass.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from core.ports import Sweepable

LOGGER = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 600.0


class ExpirySweeper:
    """Periodically calls ``sweep_expired`` on every target."""

    def __init__(self, targets: Iterable[Sweepable], interval: float = DEFAULT_INTERVAL_SECONDS) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self._targets = list(targets)
        self._interval = float(interval)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        """Sweep all targets once and return the number of entries removed."""

        removed = 0
        for target in self._targets:
            try:
                removed += target.sweep_expired()
            except Exception:
                LOGGER.exception("Expiry sweep failed for %s", type(target).__name__)
        if removed:
            LOGGER.info("Expiry sweep removed %s entries", removed)
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.run_once()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""

        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        LOGGER.info("Expiry sweeper started (every %ss)", self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""

        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        LOGGER.info("Expiry sweeper stopped")
