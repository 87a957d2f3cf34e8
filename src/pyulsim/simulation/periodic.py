"""Fixed-cadence asyncio ticker with a skip-if-busy guard."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

TickBody = Callable[[], Awaitable[None] | None]


class PeriodicTask:
    """Run *body* every *interval* seconds.

    A firing that arrives while the previous run is still in progress is
    skipped outright, never queued, so runs of one task never overlap.
    Firings missed while the event loop itself was blocked are counted as
    skipped too; the ticker resumes on the next future slot.
    Exceptions from *body* are logged and do not stop the ticker.
    """

    def __init__(self, name: str, interval: float, body: TickBody) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._body = body
        self._in_progress = False
        self._ticker: asyncio.Task[None] | None = None
        self._current: asyncio.Task[None] | None = None
        self.runs = 0
        self.skipped = 0

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    def start(self, *, delay: float = 0.0) -> None:
        """Begin firing after *delay* seconds (plus one interval)."""
        if self.is_running:
            return
        self._ticker = asyncio.get_running_loop().create_task(self._tick_forever(delay), name=f"ticker-{self.name}")

    async def stop(self) -> None:
        """Stop the timer and wait for an in-flight run to finish."""
        ticker = self._ticker
        self._ticker = None
        if ticker is not None:
            ticker.cancel()
            await asyncio.gather(ticker, return_exceptions=True)
        current = self._current
        if current is not None and not current.done():
            await asyncio.gather(current, return_exceptions=True)

    async def _tick_forever(self, delay: float) -> None:
        loop = asyncio.get_running_loop()
        if delay > 0:
            await asyncio.sleep(delay)
        next_fire = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_fire - loop.time()))
            now = loop.time()
            next_fire += self.interval
            # Firings that fell due while the loop was blocked are dropped.
            missed = 0
            while next_fire <= now:
                next_fire += self.interval
                missed += 1
            if missed:
                self.skipped += missed
                _logger.debug("%s ticker fell behind, skipping %d firings", self.name, missed)
            self.fire()

    def fire(self) -> asyncio.Task[None] | None:
        """Start one run now, unless one is already in progress."""
        if self._in_progress:
            self.skipped += 1
            _logger.debug("%s tick still running, skipping this firing", self.name)
            return None
        self._in_progress = True
        self._current = asyncio.get_running_loop().create_task(self._run(), name=f"tick-{self.name}")
        return self._current

    async def _run(self) -> None:
        try:
            result = self._body()
            if inspect.isawaitable(result):
                await result
        except Exception:
            _logger.exception("%s tick failed", self.name)
        finally:
            self.runs += 1
            self._in_progress = False
