"""Result Sink: applies settled caption results to state and speech."""

import logging
from collections.abc import Callable

from ..client.result import CaptionResult, Outcome
from ..errors import CaptionError
from ..speech.queue import SpeechQueue
from .request_manager import ProcessingRequest
from .state import ApplicationState

logger = logging.getLogger(__name__)


class ResultSink:
    """
    Routes results and errors into ApplicationState and the speech queue.

    Only results for the current request are applied; ``is_current`` is the
    Request Manager's sequence gate.
    """

    def __init__(
        self,
        state: ApplicationState,
        speech: SpeechQueue,
        is_current: Callable[[int], bool],
    ):
        self.state = state
        self.speech = speech
        self.is_current = is_current

        self.applied = 0
        self.discarded = 0

    def on_dispatch(self, request: ProcessingRequest) -> None:
        """A new request started; drop a stale error banner."""
        self.state.clear_error()

    def on_result(self, result: CaptionResult) -> bool:
        """
        Apply a settled result.

        Returns:
            True if the result changed state.
        """
        if result.is_cancelled:
            logger.debug(f"Request #{result.sequence} cancelled")
            return False

        if not self.is_current(result.sequence):
            self.discarded += 1
            logger.info(f"Discarding result of superseded request #{result.sequence}")
            return False

        if result.outcome is Outcome.OK:
            logger.info(f"Caption #{result.sequence} ({result.latency_ms:.0f}ms): {result.caption}")
            self.state.set_caption(result.caption)
            self.speech.enqueue(result.caption)
        elif result.outcome is Outcome.ERROR:
            self.state.set_error(result.error.describe())
        else:
            logger.info(f"No caption for request #{result.sequence}")
            return False

        self.applied += 1
        return True

    def on_error(self, error: CaptionError) -> None:
        """Surface a local error (capture, validation, file read)."""
        logger.warning(f"{error.kind}: {error.describe()}")
        self.state.set_error(error.describe())

    async def consume(self, request: ProcessingRequest) -> CaptionResult:
        """Wait for a dispatched request to settle and apply its result."""
        self.on_dispatch(request)
        result = await request.task
        self.on_result(result)
        return result
