"""Speech output for captions."""

from .engine import NullSpeechEngine, Pyttsx3Engine, SpeechEngine, SpeechUtterance
from .queue import SpeechQueue

__all__ = [
    "NullSpeechEngine",
    "Pyttsx3Engine",
    "SpeechEngine",
    "SpeechQueue",
    "SpeechUtterance",
]
