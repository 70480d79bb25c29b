"""
Live Vision

Spoken image captions from a camera feed or a selected image file.

Modules:
- capture: Camera snapshots and one-shot image files
- client: Caption service HTTP client and result type
- core: Scheduler, request manager, result sink and mode controller
- speech: Cancel-and-replace speech queue
- config: Endpoints and loop constants
- utils: Logging setup

Usage:
    from live_vision import LiveVision

    app = LiveVision()
    asyncio.run(app.run_live(duration=30))
"""

__version__ = "1.0.0"

from .app import LiveVision
from .client import CaptionResult, CaptionServiceClient
from .core import ApplicationState, Mode, ModeController
from .utils import get_logger, setup_logging

__all__ = [
    "ApplicationState",
    "CaptionResult",
    "CaptionServiceClient",
    "LiveVision",
    "Mode",
    "ModeController",
    "get_logger",
    "setup_logging",
]
