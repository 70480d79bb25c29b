#!/usr/bin/env python3
"""
Live Vision - Spoken Image Captions

Snapshots the camera every few seconds (or takes one image file), sends it
to the caption service, prints the caption and reads it aloud.

Usage:
  python -m live_vision                       # Live camera captions
  python -m live_vision --file photo.jpg      # Caption one image and exit
  python -m live_vision --duration 60         # Stop live mode after 60s
"""

import argparse
import asyncio
import contextlib
import logging
import signal

from . import __version__
from .capture import CameraCapture, FileCapture
from .client import CaptionServiceClient
from .config import CAMERA_INDEX, CAPTION_SERVICE_URL, SPEECH_ENABLED
from .core import (
    ApplicationState,
    CaptureScheduler,
    Mode,
    ModeController,
    RequestManager,
    ResultSink,
)
from .speech import NullSpeechEngine, Pyttsx3Engine, SpeechEngine, SpeechQueue
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


class LiveVision:
    """Main application class wiring capture, captioning and speech."""

    def __init__(
        self,
        url: str = CAPTION_SERVICE_URL,
        camera_index: int = CAMERA_INDEX,
        mode: Mode = Mode.LIVE,
        enable_speech: bool = SPEECH_ENABLED,
        speech_engine: SpeechEngine | None = None,
    ):
        """
        Initialize Live Vision application.

        Args:
            url: Caption service base URL
            camera_index: OpenCV camera index for live mode
            mode: Initial capture mode
            enable_speech: Read captions aloud
            speech_engine: Engine override (defaults to pyttsx3 or silent)
        """
        self.state = ApplicationState(mode=mode)
        self.state.on_change = self._on_state_change
        self._last_display = ""

        if speech_engine is None:
            speech_engine = Pyttsx3Engine() if enable_speech else NullSpeechEngine()

        self.client = CaptionServiceClient(url=url)
        self.request_manager = RequestManager(self.client, self.state)
        self.speech = SpeechQueue(speech_engine)
        self.sink = ResultSink(self.state, self.speech, self.request_manager.is_current)
        self.scheduler = CaptureScheduler(
            CameraCapture(device_index=camera_index), self.request_manager, self.sink
        )
        self.controller = ModeController(
            self.state,
            self.scheduler,
            self.request_manager,
            self.sink,
            self.speech,
            FileCapture(),
        )
        self._stop = asyncio.Event()

    def _on_state_change(self, state: ApplicationState):
        """Print the display line whenever it changes."""
        text = state.display_text
        if state.is_processing:
            text += "  (processing...)"
        if text != self._last_display:
            self._last_display = text
            print(text, flush=True)

    def stop(self):
        """Request shutdown."""
        self._stop.set()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            # Not available on Windows event loops; Ctrl+C still raises there
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, self.stop)

    async def run_live(self, duration: float | None = None):
        """Caption the camera until stopped or ``duration`` seconds pass."""
        self._install_signal_handlers()
        await self.client.check_health()
        self.controller.start()
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=duration)
        except asyncio.TimeoutError:
            logger.info(f"Duration of {duration}s reached")
        finally:
            await self.controller.close()

    async def run_file(self, path: str):
        """Caption one image file, wait for speech to finish, then exit."""
        try:
            result = await self.controller.submit_file(path)
            if result is not None and result.ok:
                await self.speech.wait_idle()
            return result
        finally:
            await self.controller.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description=f"Live Vision v{__version__}")
    parser.add_argument("--url", default=CAPTION_SERVICE_URL, help="Caption service URL")
    parser.add_argument("--camera", type=int, default=CAMERA_INDEX, help="Camera device index")
    parser.add_argument("--file", help="Caption a single image file and exit")
    parser.add_argument("--duration", type=float, help="Stop live mode after N seconds")
    parser.add_argument("--no-speech", action="store_true", help="Print captions without speaking")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(level="DEBUG" if args.debug else None)

    print("+======================================+")
    print(f"|          Live Vision v{__version__}            |")
    print("+======================================+")
    print(f"Caption service: {args.url}")
    print(f"Source: {'File ' + args.file if args.file else f'Camera {args.camera}'}")
    print(f"Speech: {'OFF' if args.no_speech else 'ON'}")
    print()

    mode = Mode.FILE if args.file else Mode.LIVE
    app = LiveVision(
        url=args.url,
        camera_index=args.camera,
        mode=mode,
        enable_speech=SPEECH_ENABLED and not args.no_speech,
    )

    if args.file:
        result = asyncio.run(app.run_file(args.file))
        return 0 if result is not None and result.ok else 1

    asyncio.run(app.run_live(duration=args.duration))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
