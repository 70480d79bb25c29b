"""Async HTTP client for the caption service."""

import logging
from typing import Optional

import httpx

from ..config import CAPTION_SERVICE_URL, REQUEST_TIMEOUT_MS
from ..errors import RequestTimeout, ServerError, TransportError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> Optional[str]:
    """Pull the "error" field out of an error response body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class CaptionServiceClient:
    """Async HTTP client for the caption service with connection pooling."""

    def __init__(self, url: str | None = None, timeout: float | None = None):
        self.url = (url or CAPTION_SERVICE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT_MS / 1000
        self.available = False
        self._http: Optional[httpx.AsyncClient] = None

    async def _get_http(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client with connection pooling."""
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
        return self._http

    async def check_health(self) -> bool:
        """Check if the caption service is reachable."""
        try:
            http = await self._get_http()
            response = await http.get(f"{self.url}/health")
            if response.status_code == 200:
                self.available = True
                logger.info(f"Caption service connected: {self.url}")
                return True
            logger.warning(f"Caption service health returned {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Caption service not available: {e}")

        self.available = False
        return False

    async def caption(self, image_base64: str) -> Optional[str]:
        """
        Send one image to the caption service.

        Args:
            image_base64: Encoded image (data URL or bare base64)

        Returns:
            Caption text, or None when the service produced no caption.

        Raises:
            ServerError: Non-2xx response, or a 2xx body that is not JSON.
            TransportError: Service unreachable or connection dropped.
            RequestTimeout: No answer within the client timeout.
        """
        http = await self._get_http()
        try:
            response = await http.post(f"{self.url}/process", json={"image_base64": image_base64})
        except httpx.TimeoutException as e:
            logger.warning(f"Caption request timed out after {self.timeout:.1f}s")
            raise RequestTimeout(self.timeout) from e
        except httpx.HTTPError as e:
            logger.warning(f"Caption request failed: {e}")
            raise TransportError(str(e) or None) from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning(f"Caption service returned {response.status_code}: {message}")
            raise ServerError(response.status_code, message)

        try:
            data = response.json()
        except ValueError as e:
            raise ServerError(response.status_code, "Invalid response from caption service") from e

        caption = data.get("caption") if isinstance(data, dict) else None
        if not caption:
            logger.debug("No caption in response")
            return None
        return str(caption).strip() or None

    async def close(self):
        """Close HTTP client."""
        if self._http:
            await self._http.aclose()
            self._http = None
