"""Captured image frames."""

import base64
import time
from dataclasses import dataclass, field
from enum import Enum


class FrameSource(str, Enum):
    """Where a frame came from."""

    LIVE = "live"
    FILE = "file"


@dataclass(frozen=True)
class CaptureFrame:
    """
    One encoded image, ready to send to the caption service.

    Attributes:
        data: Base64 data URL ("data:image/jpeg;base64,...")
        source: Capture source tag
        mime_type: Image MIME type
        captured_at: Capture time (epoch seconds)
        name: File name for uploads, empty for live frames
    """

    data: str
    source: FrameSource
    mime_type: str = "image/jpeg"
    captured_at: float = field(default_factory=time.time)
    name: str = ""

    @classmethod
    def from_bytes(
        cls, raw: bytes, source: FrameSource, mime_type: str = "image/jpeg", name: str = ""
    ) -> "CaptureFrame":
        """Encode raw image bytes as a data URL frame."""
        encoded = base64.b64encode(raw).decode("ascii")
        return cls(
            data=f"data:{mime_type};base64,{encoded}",
            source=source,
            mime_type=mime_type,
            name=name,
        )

    @property
    def size(self) -> int:
        """Length of the encoded payload in characters."""
        return len(self.data)

    def __repr__(self) -> str:
        label = f" {self.name}" if self.name else ""
        return f"CaptureFrame({self.source.value}{label}, {self.mime_type}, {self.size} chars)"
