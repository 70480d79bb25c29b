"""
Live Vision Settings

Single source of truth for endpoints and loop timing. Endpoint values come
from the environment; loop timing and intake limits are fixed.
"""

import os
from typing import Any

# ============== Endpoints ==============
# Local development settings (localhost)
SERVICES_LOCAL: dict[str, dict[str, Any]] = {
    "gateway": {
        "name": "Caption Gateway",
        "url": "http://localhost:8080",
        "description": "Validates frames and forwards them to the caption model",
    },
    "backend": {
        "name": "Caption Model",
        "url": "http://localhost:8000",
        "description": "Image captioning model serving POST /caption",
    },
}

# Docker internal settings (service names)
SERVICES_DOCKER: dict[str, dict[str, Any]] = {
    "gateway": {
        "name": "Caption Gateway",
        "url": "http://caption-gateway:8080",  # Docker service name
        "description": "Validates frames and forwards them to the caption model",
    },
    "backend": {
        "name": "Caption Model",
        "url": "http://caption-model:8000",  # Docker service name
        "description": "Image captioning model serving POST /caption",
    },
}

# Auto-detect environment: use Docker config if running in container
IS_DOCKER = os.path.exists("/.dockerenv") or os.getenv("DOCKER_CONTAINER", "").lower() == "true"
SERVICES = SERVICES_DOCKER if IS_DOCKER else SERVICES_LOCAL

CAPTION_SERVICE_URL = os.getenv("CAPTION_SERVICE_URL", SERVICES["gateway"]["url"]).rstrip("/")

# ============== Capture loop ==============
CAPTURE_INTERVAL_MS = 3000
REQUEST_TIMEOUT_MS = 10000

CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", "0"))
FRAME_WIDTH = 640
FRAME_HEIGHT = 480
JPEG_QUALITY = 90

# ============== File intake ==============
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
IMAGE_MIME_PREFIX = "image/"

# ============== Speech ==============
SPEECH_ENABLED = os.getenv("SPEECH_ENABLED", "true").lower() == "true"
SPEECH_RATE = 1.0
SPEECH_PITCH = 1.0
SPEECH_VOLUME = 1.0
SPEECH_GAP_MS = 100

# ============== Gateway ==============
CAPTION_BACKEND_URL = os.getenv("CAPTION_BACKEND_URL", SERVICES["backend"]["url"]).rstrip("/")
GATEWAY_TIMEOUT = float(os.getenv("GATEWAY_TIMEOUT", "30.0"))
GATEWAY_MAX_BODY_BYTES = 10 * 1024 * 1024
GATEWAY_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("GATEWAY_ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


def get_service_config(service: str = "gateway") -> dict[str, Any]:
    """
    Get configuration for a service endpoint.

    Args:
        service: Service name ('gateway' or 'backend').

    Returns:
        Service configuration dictionary, with the URL resolved from the
        environment override when one is set.

    Raises:
        KeyError: If service name is not found.
    """
    if service not in SERVICES:
        raise KeyError(f"Unknown service: {service}. Available: {list(SERVICES.keys())}")
    config = dict(SERVICES[service])
    config["url"] = CAPTION_SERVICE_URL if service == "gateway" else CAPTION_BACKEND_URL
    return config
