"""
Unit tests for live_vision.capture.sources.

OpenCV is replaced by the ``mock_cv2`` fixture, so no camera is needed.
"""

import numpy as np
import pytest

from live_vision.capture.frame import FrameSource
from live_vision.capture.sources import CameraCapture, FileCapture
from live_vision.errors import FileReadError, ValidationError

MB = 1024 * 1024


def write_sized(path, size):
    """Create a file of ``size`` bytes without building it in memory."""
    with open(path, "wb") as f:
        f.truncate(size)
    return path


class TestCameraCapture:
    """Tests for CameraCapture."""

    def test_start_opens_device(self, mock_cv2):
        camera = CameraCapture(device_index=2, width=320, height=240)
        assert camera.start() is True
        assert camera.running is True
        mock_cv2.VideoCapture.assert_called_once_with(2)
        camera.capture.set.assert_any_call(mock_cv2.CAP_PROP_FRAME_WIDTH, 320)
        camera.capture.set.assert_any_call(mock_cv2.CAP_PROP_FRAME_HEIGHT, 240)

    def test_start_fails_when_not_opened(self, mock_cv2):
        mock_cv2.VideoCapture.return_value.isOpened.return_value = False
        camera = CameraCapture()
        assert camera.start() is False
        assert camera.running is False
        assert camera.capture is None

    def test_get_frame_encodes_jpeg(self, mock_cv2):
        device = mock_cv2.VideoCapture.return_value
        device.read.return_value = (True, np.ones((4, 4, 3), dtype=np.uint8))
        mock_cv2.imencode.return_value = (True, np.frombuffer(b"jpegdata", dtype=np.uint8))

        camera = CameraCapture()
        camera.start()
        frame = camera.get_frame()

        assert frame is not None
        assert frame.source is FrameSource.LIVE
        assert frame.data.startswith("data:image/jpeg;base64,")

    def test_get_frame_before_start(self, mock_cv2):
        assert CameraCapture().get_frame() is None

    def test_read_failure_returns_none(self, mock_cv2):
        mock_cv2.VideoCapture.return_value.read.return_value = (False, None)
        camera = CameraCapture()
        camera.start()
        assert camera.get_frame() is None

    def test_driver_error_returns_none(self, mock_cv2):
        """A cv2 error while reading or encoding is an unavailable frame."""
        device = mock_cv2.VideoCapture.return_value
        device.read.side_effect = RuntimeError("cv2.error: camera glitch")
        camera = CameraCapture()
        camera.start()
        assert camera.get_frame() is None

        device.read.side_effect = None
        device.read.return_value = (True, np.ones((4, 4, 3), dtype=np.uint8))
        mock_cv2.imencode.side_effect = RuntimeError("cv2.error: encode")
        assert camera.get_frame() is None

    def test_blank_frame_returns_none(self, mock_cv2):
        """An all-black frame means the feed is not ready yet."""
        device = mock_cv2.VideoCapture.return_value
        device.read.return_value = (True, np.zeros((4, 4, 3), dtype=np.uint8))
        camera = CameraCapture()
        camera.start()
        assert camera.get_frame() is None
        mock_cv2.imencode.assert_not_called()

    def test_stop_releases_device(self, mock_cv2):
        camera = CameraCapture()
        camera.start()
        device = camera.capture
        camera.stop()
        device.release.assert_called_once()
        assert camera.running is False
        assert camera.get_frame() is None


class TestFileValidation:
    """Tests for FileCapture.validate."""

    def test_rejects_non_image(self):
        with pytest.raises(ValidationError, match="Please select an image file"):
            FileCapture().validate(100, "text/plain")

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            FileCapture().validate(100, None)

    def test_rejects_over_limit(self):
        with pytest.raises(ValidationError, match=r"too large \(max 10MB\)"):
            FileCapture().validate(11 * MB, "image/jpeg")

    def test_accepts_exact_limit(self):
        FileCapture().validate(10 * MB, "image/jpeg")


class TestFileCapture:
    """Tests for loading files into FileCapture."""

    @pytest.mark.asyncio
    async def test_load_path_accepts_small_image(self, tmp_path, mock_cv2):
        path = write_sized(tmp_path / "photo.png", 1 * MB)
        files = FileCapture()

        frame = await files.load_path(path)

        assert frame.source is FrameSource.FILE
        assert frame.mime_type == "image/png"
        assert frame.name == "photo.png"
        mock_cv2.imdecode.assert_called_once()

    @pytest.mark.asyncio
    async def test_frame_is_consumed_once(self, tmp_path, mock_cv2):
        files = FileCapture()
        loaded = await files.load_path(write_sized(tmp_path / "photo.jpg", 1024))

        assert files.get_frame() is loaded
        assert files.get_frame() is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size_mb", [11, 15])
    async def test_load_path_rejects_large_file_unread(self, tmp_path, mock_cv2, size_mb):
        """Oversized files are rejected from their size alone."""
        path = write_sized(tmp_path / "big.jpg", size_mb * MB)
        files = FileCapture()

        with pytest.raises(ValidationError):
            await files.load_path(path)

        mock_cv2.imdecode.assert_not_called()
        assert files.get_frame() is None

    @pytest.mark.asyncio
    async def test_load_path_rejects_text(self, tmp_path, mock_cv2):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(ValidationError, match="Please select an image file"):
            await FileCapture().load_path(path)

    @pytest.mark.asyncio
    async def test_load_path_missing_file(self, tmp_path):
        with pytest.raises(FileReadError, match="Cannot read missing.png"):
            await FileCapture().load_path(tmp_path / "missing.png")

    @pytest.mark.asyncio
    async def test_load_bytes_undecodable(self, mock_cv2):
        mock_cv2.imdecode.return_value = None
        files = FileCapture()

        with pytest.raises(FileReadError, match="Cannot decode upload.png"):
            await files.load_bytes(b"garbage", "image/png", name="upload.png")
        assert files.get_frame() is None

    @pytest.mark.asyncio
    async def test_stop_drops_pending(self, mock_cv2):
        files = FileCapture()
        files.start()
        await files.load_bytes(b"img", "image/jpeg")
        files.stop()
        assert files.running is False
        assert files.get_frame() is None
