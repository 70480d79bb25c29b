"""
Request Manager

Owns the single outstanding call to the caption service.

Single-flight is enforced twice: dispatching a new request cancels the
previous one's token, and ``is_current()`` rejects any result whose sequence
number is not the latest live request. Cancelling the token asks the HTTP
call to stop, but a response can already be on its way, so the sequence
check is what keeps a superseded result out of the state.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..capture.frame import CaptureFrame
from ..client.caption_client import CaptionServiceClient
from ..client.result import CaptionResult
from ..config import REQUEST_TIMEOUT_MS
from ..errors import CaptionError, RequestTimeout
from .state import ApplicationState

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation signal for one request."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass
class ProcessingRequest:
    """
    One dispatched frame.

    Await ``task`` for the CaptionResult; use ``token`` to cancel.
    """
    sequence: int
    frame: CaptureFrame
    token: CancellationToken = field(default_factory=CancellationToken)
    dispatched_at: float = field(default_factory=time.perf_counter)
    task: Optional["asyncio.Task[CaptionResult]"] = field(default=None, repr=False)

    def cancel(self, reason: str = "cancelled") -> None:
        self.token.cancel(reason)


class RequestManager:
    """Dispatches frames to the caption service, one at a time."""

    def __init__(
        self,
        client: CaptionServiceClient,
        state: ApplicationState,
        timeout: float = REQUEST_TIMEOUT_MS / 1000,
    ):
        """
        Initialize request manager.

        Args:
            client: Caption service client
            state: Shared application state (is_processing is kept here)
            timeout: Seconds from dispatch before a request times out
        """
        self.client = client
        self.state = state
        self.timeout = timeout

        self._sequence = 0
        self._active: ProcessingRequest | None = None
        self._latest: ProcessingRequest | None = None

    @property
    def is_active(self) -> bool:
        """True while a request is outstanding."""
        return self._active is not None

    @property
    def active(self) -> ProcessingRequest | None:
        return self._active

    @property
    def sequence(self) -> int:
        """Sequence number of the most recently issued request."""
        return self._sequence

    def is_current(self, sequence: int) -> bool:
        """True only for the latest issued request that has not been cancelled."""
        latest = self._latest
        return latest is not None and latest.sequence == sequence and not latest.token.cancelled

    def dispatch(self, frame: CaptureFrame) -> ProcessingRequest:
        """
        Issue a caption request for a frame, superseding any active one.

        Must be called from the running event loop.

        Returns:
            The new request. Its task resolves to a CaptionResult and never
            raises for service failures.
        """
        self._sequence += 1
        request = ProcessingRequest(sequence=self._sequence, frame=frame)

        previous = self._active
        if previous is not None:
            logger.info(f"Request #{previous.sequence} superseded by #{request.sequence}")
            previous.cancel("superseded")

        self._active = request
        self._latest = request
        self.state.set_processing(True)

        request.task = asyncio.create_task(self._execute(request))
        logger.debug(f"Dispatched #{request.sequence}: {frame!r}")
        return request

    def cancel_active(self, reason: str = "cancelled") -> bool:
        """
        Cancel the active request, if any.

        Returns:
            True if a request was cancelled.
        """
        request = self._active
        if request is None:
            return False

        logger.info(f"Cancelling request #{request.sequence} ({reason})")
        request.cancel(reason)
        self._settle(request)
        return True

    async def _execute(self, request: ProcessingRequest) -> CaptionResult:
        call = asyncio.create_task(self.client.caption(request.frame.data))
        cancelled = asyncio.create_task(request.token.wait())

        try:
            done, _pending = await asyncio.wait(
                {call, cancelled},
                timeout=self.timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (call, cancelled):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task
            self._settle(request)

        latency_ms = (time.perf_counter() - request.dispatched_at) * 1000
        result = self._classify(request, call, done, latency_ms)
        logger.debug(f"{result} ({latency_ms:.0f}ms)")
        return result

    def _classify(
        self, request: ProcessingRequest, call: asyncio.Task, done: set, latency_ms: float
    ) -> CaptionResult:
        seq = request.sequence

        # The token wins even over a response that has already arrived
        if request.token.cancelled:
            return CaptionResult.cancelled(seq, latency_ms)

        if call not in done:
            logger.warning(f"Request #{seq} timed out after {self.timeout:.1f}s")
            return CaptionResult.from_error(seq, RequestTimeout(self.timeout), latency_ms)

        error = call.exception()
        if error is None:
            caption = call.result()
            if caption:
                return CaptionResult.from_caption(seq, caption, latency_ms)
            return CaptionResult.no_caption(seq, latency_ms)

        if isinstance(error, CaptionError):
            return CaptionResult.from_error(seq, error, latency_ms)

        logger.error(f"Request #{seq} failed unexpectedly: {error!r}")
        return CaptionResult.from_error(seq, CaptionError(str(error) or None), latency_ms)

    def _settle(self, request: ProcessingRequest) -> None:
        if self._active is request:
            self._active = None
            self.state.set_processing(False)

    async def close(self) -> None:
        """Cancel outstanding work and close the HTTP client."""
        request = self._active
        self.cancel_active("shutdown")
        if request is not None and request.task is not None:
            await asyncio.wait({request.task})
        await self.client.close()
