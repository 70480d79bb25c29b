"""
Application State Module

The single state container for a captioning session. The Mode Controller
owns it and hands it by reference to the Request Manager and Result Sink;
a presentation layer only observes it through ``on_change``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..capture.frame import CaptureFrame

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Which capture source is active."""

    LIVE = "live"
    FILE = "file"


@dataclass
class ApplicationState:
    """
    Display-facing state of a captioning session.

    Display precedence: a non-empty error is shown instead of the caption.
    The caption is kept while an error is shown, so it comes back once a
    later request succeeds.
    """
    mode: Mode = Mode.LIVE
    caption: str = ""
    error: str = ""
    is_processing: bool = False
    uploaded_frame: Optional[CaptureFrame] = None
    on_change: Optional[Callable[["ApplicationState"], None]] = field(
        default=None, repr=False, compare=False
    )

    def set_caption(self, caption: str) -> None:
        """Show a new caption and clear any prior error."""
        self.caption = caption
        self.error = ""
        self._notify()

    def set_error(self, message: str) -> None:
        """Show an error banner. The caption is left as is."""
        self.error = message
        self._notify()

    def clear_error(self) -> None:
        if self.error:
            self.error = ""
            self._notify()

    def set_processing(self, processing: bool) -> None:
        if self.is_processing != processing:
            self.is_processing = processing
            self._notify()

    def set_uploaded_frame(self, frame: Optional[CaptureFrame]) -> None:
        self.uploaded_frame = frame
        self._notify()

    def reset_for(self, mode: Mode) -> None:
        """Enter a mode, clearing derived state."""
        self.mode = mode
        self.caption = ""
        self.error = ""
        if mode is Mode.LIVE:
            self.uploaded_frame = None
        self._notify()

    @property
    def display_text(self) -> str:
        """Single display line, honouring error-over-caption precedence."""
        if self.error:
            return f"⚠️ {self.error}"
        if self.caption:
            return f"📷 {self.caption}"
        if self.mode is Mode.FILE:
            return "🖼️ Select an image to caption"
        return "👁️ Watching..."

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self)
        except Exception:
            logger.exception("State observer failed")
