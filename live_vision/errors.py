"""
Classified errors for the capture-dispatch-respond loop.

Every failure the loop can surface is a CaptionError subclass with a stable
``kind`` and a user-facing ``describe()``. Cancellation is not an error and
has no class here.
"""


class CaptionError(Exception):
    """Base class for errors surfaced to the user."""

    kind = "error"
    default_message = "Processing failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def describe(self) -> str:
        """Text shown in the error banner."""
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class CaptureUnavailable(CaptionError):
    """Live source produced no frame. Transient, retried on the next tick."""

    kind = "capture_unavailable"
    default_message = "capture failed"


class ValidationError(CaptionError):
    """Selected file is not an image or is too large. No dispatch happens."""

    kind = "validation"
    default_message = "Invalid image file"


class FileReadError(CaptionError):
    """Selected file could not be read or decoded."""

    kind = "file_read"
    default_message = "Failed to read image file"


class RequestTimeout(CaptionError):
    """Caption service did not answer within the request timeout."""

    kind = "timeout"

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"timeout of {int(timeout * 1000)}ms exceeded")


class ServerError(CaptionError):
    """Caption service answered with a non-2xx status."""

    kind = "server"

    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(message or f"Request failed with status code {status_code}")


class TransportError(CaptionError):
    """Caption service could not be reached."""

    kind = "transport"
    default_message = "Network Error"
