"""
Mode Controller

State machine over the two capture modes:

    LIVE  - the scheduler snapshots the camera every tick
    FILE  - the user selects an image, which is captioned once

A switch tears down everything that belongs to the old mode (timer,
in-flight request, speech) before the new mode starts.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from ..capture.sources import CaptureSource, FileCapture
from ..client.result import CaptionResult
from ..errors import CaptionError
from ..speech.queue import SpeechQueue
from .request_manager import RequestManager
from .scheduler import CaptureScheduler
from .sink import ResultSink
from .state import ApplicationState, Mode

logger = logging.getLogger(__name__)


class ModeController:
    """Owns the session state and drives mode transitions."""

    def __init__(
        self,
        state: ApplicationState,
        scheduler: CaptureScheduler,
        request_manager: RequestManager,
        sink: ResultSink,
        speech: SpeechQueue,
        file_source: FileCapture,
        on_mode_change: Optional[Callable[[Mode], None]] = None,
    ):
        self.state = state
        self.scheduler = scheduler
        self.request_manager = request_manager
        self.sink = sink
        self.speech = speech
        self.file_source = file_source
        self.on_mode_change = on_mode_change
        # Bumped on every mode switch; a decode from an older generation is stale
        self._generation = 0

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def live_source(self) -> CaptureSource:
        return self.scheduler.source

    def start(self) -> None:
        """Start the initial mode. Must be called from the running event loop."""
        logger.info(f"Starting in {self.mode.value} mode")
        if self.mode is Mode.LIVE:
            self.scheduler.start()
        else:
            self.file_source.start()

    def switch_to(self, mode: Mode) -> bool:
        """
        Switch capture mode.

        Returns:
            False if ``mode`` is already active (nothing is touched).
        """
        mode = Mode(mode)
        if mode is self.mode:
            return False

        logger.info(f"Switching mode: {self.mode.value} -> {mode.value}")
        self._generation += 1
        self._teardown()

        self.state.reset_for(mode)
        if mode is Mode.LIVE:
            self.file_source.stop()
            self.scheduler.start()
        else:
            self.live_source.stop()
            self.file_source.start()

        if self.on_mode_change is not None:
            try:
                self.on_mode_change(mode)
            except Exception:
                logger.exception("Mode observer failed")
        return True

    async def submit_file(
        self,
        path: str | Path | None = None,
        data: bytes | None = None,
        mime_type: str | None = None,
        name: str = "",
    ) -> Optional[CaptionResult]:
        """
        Caption a user-selected image once.

        Pass either ``path`` or ``data`` with its ``mime_type``. Selecting a
        file in live mode switches to file mode first, which cancels the live
        request.

        Returns:
            The settled result, or None if the file was rejected locally.
        """
        if (path is None) == (data is None):
            raise ValueError("Pass exactly one of path or data")

        self.switch_to(Mode.FILE)
        generation = self._generation

        try:
            if path is not None:
                await self.file_source.load_path(path)
            else:
                await self.file_source.load_bytes(data, mime_type, name=name)
        except CaptionError as e:
            if generation == self._generation:
                self.sink.on_error(e)
            return None

        frame = self.file_source.get_frame()
        if frame is None or generation != self._generation:
            # Mode changed while the file was decoding
            logger.info("Discarding decoded file: mode switched during decode")
            return None

        self.state.set_uploaded_frame(frame)
        request = self.request_manager.dispatch(frame)
        return await self.sink.consume(request)

    def _teardown(self) -> None:
        self.scheduler.stop()
        self.request_manager.cancel_active("mode switch")
        self.speech.cancel()

    async def close(self) -> None:
        """Release timer, active request and speech, then close the client."""
        logger.info("Closing capture session")
        self._teardown()
        await self.scheduler.close()
        await self.speech.close()
        await self.request_manager.close()
        self.file_source.stop()
