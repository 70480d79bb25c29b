"""
Caption Service Client Module

Provides the HTTP client for the caption service and the result type the
control loop passes around.

Usage:
    from live_vision.client import CaptionServiceClient

    client = CaptionServiceClient()
    caption = await client.caption(frame.data)
"""

from .caption_client import CaptionServiceClient
from .result import CaptionResult, Outcome

__all__ = [
    "CaptionResult",
    "CaptionServiceClient",
    "Outcome",
]
