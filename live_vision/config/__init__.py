"""
Live Vision Configuration Module

Centralized endpoint definitions and loop constants.
"""

from .settings import (
    CAMERA_INDEX,
    CAPTION_BACKEND_URL,
    CAPTION_SERVICE_URL,
    CAPTURE_INTERVAL_MS,
    FRAME_HEIGHT,
    FRAME_WIDTH,
    GATEWAY_ALLOWED_ORIGINS,
    GATEWAY_MAX_BODY_BYTES,
    GATEWAY_TIMEOUT,
    IMAGE_MIME_PREFIX,
    JPEG_QUALITY,
    MAX_UPLOAD_BYTES,
    REQUEST_TIMEOUT_MS,
    SERVICES,
    SPEECH_ENABLED,
    SPEECH_GAP_MS,
    SPEECH_PITCH,
    SPEECH_RATE,
    SPEECH_VOLUME,
    get_service_config,
)

__all__ = [
    "CAMERA_INDEX",
    "CAPTION_BACKEND_URL",
    "CAPTION_SERVICE_URL",
    "CAPTURE_INTERVAL_MS",
    "FRAME_HEIGHT",
    "FRAME_WIDTH",
    "GATEWAY_ALLOWED_ORIGINS",
    "GATEWAY_MAX_BODY_BYTES",
    "GATEWAY_TIMEOUT",
    "IMAGE_MIME_PREFIX",
    "JPEG_QUALITY",
    "MAX_UPLOAD_BYTES",
    "REQUEST_TIMEOUT_MS",
    "SERVICES",
    "SPEECH_ENABLED",
    "SPEECH_GAP_MS",
    "SPEECH_PITCH",
    "SPEECH_RATE",
    "SPEECH_VOLUME",
    "get_service_config",
]
