"""Capture sources for camera frames and user-selected image files."""

import asyncio
import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np

from ..config import (
    CAMERA_INDEX,
    FRAME_HEIGHT,
    FRAME_WIDTH,
    IMAGE_MIME_PREFIX,
    JPEG_QUALITY,
    MAX_UPLOAD_BYTES,
)
from ..errors import FileReadError, ValidationError
from .frame import CaptureFrame, FrameSource

logger = logging.getLogger(__name__)


class CaptureSource(ABC):
    """Abstract base class for frame sources."""

    def __init__(self):
        self.running = False

    @abstractmethod
    def start(self) -> bool:
        """Open the source. Returns True on success."""
        pass

    @abstractmethod
    def stop(self):
        """Release the source."""
        pass

    @abstractmethod
    def get_frame(self) -> CaptureFrame | None:
        """Return one frame, or None when the source has nothing to give."""
        pass

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return human-readable source name."""
        pass


class CameraCapture(CaptureSource):
    """Snapshot frames from a camera using OpenCV."""

    def __init__(
        self,
        device_index: int = CAMERA_INDEX,
        width: int = FRAME_WIDTH,
        height: int = FRAME_HEIGHT,
        jpeg_quality: int = JPEG_QUALITY,
    ):
        """
        Initialize camera capture.

        Args:
            device_index: OpenCV camera index
            width: Requested frame width
            height: Requested frame height
            jpeg_quality: JPEG encode quality (0-100)
        """
        super().__init__()
        self.device_index = device_index
        self.width = width
        self.height = height
        self.jpeg_quality = jpeg_quality
        self.capture = None

    @property
    def source_name(self) -> str:
        return f"📷 Camera {self.device_index}"

    def start(self) -> bool:
        if self.running:
            return True

        try:
            import cv2

            self.capture = cv2.VideoCapture(self.device_index)
            if not self.capture.isOpened():
                logger.error(f"Cannot open camera device {self.device_index}")
                self.capture.release()
                self.capture = None
                return False

            self.capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            self.capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

            self.running = True
            logger.info(f"Camera started (device {self.device_index}, {self.width}x{self.height})")
            return True

        except Exception as e:
            logger.error(f"Camera start failed: {e}")
            self.capture = None
            return False

    def get_frame(self) -> CaptureFrame | None:
        if not self.running or self.capture is None:
            return None

        try:
            import cv2

            ok, image = self.capture.read()
            if not ok or image is None:
                logger.warning("Camera read failed")
                return None

            # Cameras deliver all-black frames while the sensor warms up
            if not np.any(image):
                logger.debug("Camera frame is blank, feed not ready")
                return None

            ok, buffer = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality])
            if not ok:
                logger.warning("JPEG encode failed")
                return None

        except Exception as e:
            logger.warning(f"Camera capture failed: {e}")
            return None

        return CaptureFrame.from_bytes(buffer.tobytes(), FrameSource.LIVE, "image/jpeg")

    def stop(self):
        self.running = False

        if self.capture is not None:
            try:
                self.capture.release()
            except Exception as e:
                logger.warning(f"Camera release failed: {e}")
            self.capture = None

        logger.info("Camera stopped")


class FileCapture(CaptureSource):
    """
    One-shot source for user-selected image files.

    A file is validated (MIME type and size) before it is read, decoded off
    the event loop, and held until the next get_frame() call consumes it.
    """

    def __init__(self, max_bytes: int = MAX_UPLOAD_BYTES):
        super().__init__()
        self.max_bytes = max_bytes
        self._pending: CaptureFrame | None = None

    @property
    def source_name(self) -> str:
        return "🖼️ Image file"

    def start(self) -> bool:
        self.running = True
        return True

    def stop(self):
        self.running = False
        self._pending = None

    def get_frame(self) -> CaptureFrame | None:
        frame, self._pending = self._pending, None
        return frame

    def validate(self, size: int, mime_type: str | None):
        """
        Check a selected file before reading it.

        Raises:
            ValidationError: Not an image type, or larger than max_bytes.
        """
        if not mime_type or not mime_type.startswith(IMAGE_MIME_PREFIX):
            raise ValidationError("Please select an image file")
        if size > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            raise ValidationError(f"Image is too large (max {limit_mb:.0f}MB)")

    async def load_path(self, path: str | Path) -> CaptureFrame:
        """
        Validate, read and decode an image file from disk.

        Raises:
            ValidationError: Bad type or size (file is not read).
            FileReadError: File missing, unreadable or not a decodable image.
        """
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)

        try:
            size = path.stat().st_size
        except OSError as e:
            raise FileReadError(f"Cannot read {path.name}: {e.strerror or e}") from e

        self.validate(size, mime_type)

        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise FileReadError(f"Cannot read {path.name}: {e.strerror or e}") from e

        return await self.load_bytes(raw, mime_type, name=path.name)

    async def load_bytes(self, raw: bytes, mime_type: str | None, name: str = "") -> CaptureFrame:
        """
        Validate and decode raw image bytes into a frame.

        Raises:
            ValidationError: Bad type or size.
            FileReadError: Bytes are not a decodable image.
        """
        self.validate(len(raw), mime_type)

        frame = await asyncio.to_thread(self._decode, raw, mime_type, name)
        self._pending = frame
        logger.info(f"Loaded image {name or '<upload>'} ({len(raw)} bytes, {mime_type})")
        return frame

    @staticmethod
    def _decode(raw: bytes, mime_type: str, name: str) -> CaptureFrame:
        import cv2

        image = cv2.imdecode(np.frombuffer(raw, dtype=np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise FileReadError(f"Cannot decode {name or 'image'}")
        return CaptureFrame.from_bytes(raw, FrameSource.FILE, mime_type, name=name)
