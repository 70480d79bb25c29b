"""
Capture Scheduler

Periodic timer for live mode. Each tick captures a frame from the live
source and dispatches it, unless a request is still outstanding.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import Optional

from ..capture.sources import CaptureSource
from ..config import CAPTURE_INTERVAL_MS
from ..errors import CaptureUnavailable
from .request_manager import RequestManager
from .sink import ResultSink

logger = logging.getLogger(__name__)

ACCESS_DENIED = "Camera access denied"


class TickOutcome(str, Enum):
    """What one tick did."""

    DISPATCHED = "dispatched"
    SKIPPED = "skipped"
    CAPTURE_FAILED = "capture_failed"


class CaptureScheduler:
    """Fires a capture tick every ``interval`` seconds while running."""

    def __init__(
        self,
        source: CaptureSource,
        request_manager: RequestManager,
        sink: ResultSink,
        interval: float = CAPTURE_INTERVAL_MS / 1000,
        on_tick: Optional[Callable[[TickOutcome], None]] = None,
    ):
        """
        Initialize capture scheduler.

        Args:
            source: Live capture source
            request_manager: Single-flight dispatcher
            sink: Where results and capture errors go
            interval: Seconds between ticks
            on_tick: Optional observer called with each tick's outcome
        """
        self.source = source
        self.request_manager = request_manager
        self.sink = sink
        self.interval = interval
        self.on_tick = on_tick

        self.ticks = 0
        self.skipped_ticks = 0
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> bool:
        """
        Start ticking. Must be called from the running event loop.

        Returns:
            False if already running.
        """
        if self.running:
            return False
        self._ensure_source()
        self._timer = asyncio.create_task(self._run())
        logger.info(f"Capture scheduler started ({self.interval * 1000:.0f}ms interval)")
        return True

    def stop(self) -> bool:
        """
        Cancel the pending timer. An in-flight request is left alone.

        Returns:
            False if not running.
        """
        if not self.running:
            self._timer = None
            return False
        self._timer.cancel()
        self._timer = None
        logger.info("Capture scheduler stopped")
        return True

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def tick(self) -> TickOutcome:
        """Run one capture tick."""
        self.ticks += 1

        if self.request_manager.is_active:
            self.skipped_ticks += 1
            logger.debug(f"Tick {self.ticks} skipped: request #{self.request_manager.sequence} in flight")
            return self._report(TickOutcome.SKIPPED)

        if not self._ensure_source():
            return self._report(TickOutcome.CAPTURE_FAILED)

        try:
            frame = self.source.get_frame()
        except Exception:
            logger.exception(f"{self.source.source_name} raised while capturing")
            frame = None

        if frame is None:
            self.sink.on_error(CaptureUnavailable())
            return self._report(TickOutcome.CAPTURE_FAILED)

        request = self.request_manager.dispatch(frame)
        task = asyncio.create_task(self.sink.consume(request))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return self._report(TickOutcome.DISPATCHED)

    def _ensure_source(self) -> bool:
        """Open the live source if needed; a refusal shows the access banner."""
        if self.source.running:
            return True

        try:
            started = self.source.start()
        except Exception:
            logger.exception(f"{self.source.source_name} raised while starting")
            started = False

        if not started:
            logger.warning(f"{self.source.source_name} did not start; retrying next tick")
            self.sink.on_error(CaptureUnavailable(ACCESS_DENIED))
        return started

    def _report(self, outcome: TickOutcome) -> TickOutcome:
        if self.on_tick is not None:
            try:
                self.on_tick(outcome)
            except Exception:
                logger.exception("Tick observer failed")
        return outcome

    async def drain(self) -> None:
        """Wait for results of already-dispatched ticks to be applied."""
        if self._inflight:
            await asyncio.wait(set(self._inflight))

    async def close(self) -> None:
        """Stop ticking, settle in-flight work and release the source."""
        timer = self._timer
        self.stop()
        if timer is not None:
            await asyncio.wait({timer})
        await self.drain()
        self.source.stop()
