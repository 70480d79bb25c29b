"""
Caption Gateway Service

Front door for the caption model. Validates incoming frames and forwards
them to the model backend.

Endpoints:
- GET  /health   - Health check
- POST /process  - Caption one image

Protocol:
1. Client sends: {"image_base64": "data:image/jpeg;base64,..."}
2. Server returns: {"caption": "..."} or {"error": "..."} with a non-2xx status
"""

import logging
import time

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import (
    CAPTION_BACKEND_URL,
    GATEWAY_ALLOWED_ORIGINS,
    GATEWAY_MAX_BODY_BYTES,
    GATEWAY_TIMEOUT,
)
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

__version__ = "1.0"

NO_CAPTION = "No caption generated"
BODY_TOO_LARGE = "Request body too large"


class ImageRequest(BaseModel):
    image_base64: str


class CaptionResponse(BaseModel):
    caption: str


class BackendError(Exception):
    """Caption backend call failed."""


async def get_caption_from_backend(image_base64: str) -> str:
    """
    Forward one image to the caption backend.

    Raises:
        BackendError: Transport failure, non-200 status or unreadable body.
    """
    try:
        async with httpx.AsyncClient(timeout=GATEWAY_TIMEOUT) as http:
            response = await http.post(
                f"{CAPTION_BACKEND_URL}/caption",
                json={"image_base64": image_base64},
            )
    except httpx.HTTPError as e:
        raise BackendError(f"request failed: {e}") from e

    if response.status_code != 200:
        raise BackendError(f"caption backend returned {response.status_code}: {response.text}")

    try:
        data = response.json()
    except ValueError as e:
        raise BackendError(f"failed to parse response: {e}") from e

    return str(data.get("caption") or "") if isinstance(data, dict) else ""


class BodyTooLarge(HTTPException):
    """Streamed request body went past the size limit."""

    def __init__(self):
        super().__init__(status_code=413, detail=BODY_TOO_LARGE)


class BodySizeLimitMiddleware:
    """
    Cap request bodies at ``max_bytes``.

    A declared Content-Length over the cap is refused up front. Bodies
    without one (chunked uploads) are counted as they are received and
    abandoned as soon as the count passes the cap.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            response = JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE})
            await response(scope, receive, send)
            return

        received = 0

        async def receive_limited() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning(f"Request body passed {self.max_bytes} bytes; rejecting")
                    raise BodyTooLarge()
            return message

        await self.app(scope, receive_limited, send)


# ==============================================================================
# FastAPI Application
# ==============================================================================

app = FastAPI(
    title="Caption Gateway",
    description="Validates frames and forwards them to the caption model",
    version=__version__,
)

app.add_middleware(BodySizeLimitMiddleware, max_bytes=GATEWAY_MAX_BODY_BYTES)
app.add_middleware(
    CORSMiddleware,
    allow_origins=GATEWAY_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["*"],
)


@app.exception_handler(BodyTooLarge)
async def body_too_large_handler(request: Request, exc: BodyTooLarge):
    return JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE})


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request format"})


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/process", response_model=CaptionResponse)
async def process_endpoint(request: ImageRequest):
    """Caption one image."""
    if not request.image_base64:
        return JSONResponse(status_code=400, content={"error": "image_base64 is required"})

    logger.info(f"Processing image request (size: {len(request.image_base64)} bytes)")

    start = time.perf_counter()
    try:
        caption = await get_caption_from_backend(request.image_base64)
    except BackendError as e:
        logger.error(f"Caption service error: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to generate caption"})

    caption = caption or NO_CAPTION
    latency = (time.perf_counter() - start) * 1000
    logger.info(f"Generated caption in {latency:.0f}ms: {caption}")
    return CaptionResponse(caption=caption)


# ==============================================================================
# Main Entry Point
# ==============================================================================

def main():
    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8080, log_level="info")


if __name__ == "__main__":
    main()
