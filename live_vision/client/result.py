"""
Caption Result Data Class

Represents the settled outcome of one captioning request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import CaptionError


class Outcome(str, Enum):
    """How a captioning request settled."""

    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CaptionResult:
    """
    Result from a captioning request.

    Attributes:
        sequence: Sequence number of the request that produced this result
        outcome: How the request settled
        caption: Caption text (OK only)
        error: Classified error (ERROR only)
        latency_ms: Time from dispatch to settle
    """
    sequence: int
    outcome: Outcome
    caption: str = ""
    error: Optional[CaptionError] = None
    latency_ms: float = 0.0

    @classmethod
    def from_caption(cls, sequence: int, caption: str, latency_ms: float = 0.0) -> "CaptionResult":
        """Create a successful result."""
        return cls(sequence=sequence, outcome=Outcome.OK, caption=caption, latency_ms=latency_ms)

    @classmethod
    def no_caption(cls, sequence: int, latency_ms: float = 0.0) -> "CaptionResult":
        """Create a result for a response that carried no caption."""
        return cls(sequence=sequence, outcome=Outcome.EMPTY, latency_ms=latency_ms)

    @classmethod
    def from_error(cls, sequence: int, error: CaptionError, latency_ms: float = 0.0) -> "CaptionResult":
        """Create an error result."""
        return cls(sequence=sequence, outcome=Outcome.ERROR, error=error, latency_ms=latency_ms)

    @classmethod
    def cancelled(cls, sequence: int, latency_ms: float = 0.0) -> "CaptionResult":
        """Create a result for a superseded or aborted request."""
        return cls(sequence=sequence, outcome=Outcome.CANCELLED, latency_ms=latency_ms)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def is_cancelled(self) -> bool:
        return self.outcome is Outcome.CANCELLED

    def __bool__(self) -> bool:
        """Result is truthy if successful with a caption."""
        return self.ok and bool(self.caption)

    def __str__(self) -> str:
        if self.outcome is Outcome.ERROR:
            return f"CaptionResult(#{self.sequence} error={self.error.describe()})"
        if self.outcome is Outcome.OK:
            text = self.caption if len(self.caption) <= 50 else f"{self.caption[:50]}..."
            return f"CaptionResult(#{self.sequence} ok: {text})"
        return f"CaptionResult(#{self.sequence} {self.outcome.value})"
