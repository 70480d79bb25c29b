"""Shared fixtures for Live Vision tests."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from tests.fakes import Loop


@pytest.fixture
def loop_parts():
    """Control loop wired with fakes (timer effectively manual)."""
    return Loop()


@pytest.fixture
def mock_cv2():
    """Stand-in cv2 module that decodes anything to a small image."""
    cv2 = MagicMock()
    cv2.IMREAD_COLOR = 1
    cv2.IMWRITE_JPEG_QUALITY = 1
    cv2.CAP_PROP_FRAME_WIDTH = 3
    cv2.CAP_PROP_FRAME_HEIGHT = 4
    cv2.imdecode.return_value = np.ones((2, 2, 3), dtype=np.uint8)
    with patch.dict("sys.modules", {"cv2": cv2}):
        yield cv2
