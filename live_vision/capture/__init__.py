"""Frame capture: live camera snapshots and one-shot image files."""

from .frame import CaptureFrame, FrameSource
from .sources import CameraCapture, CaptureSource, FileCapture

__all__ = [
    "CameraCapture",
    "CaptureFrame",
    "CaptureSource",
    "FileCapture",
    "FrameSource",
]
