"""Speech engines for announcing captions."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..config import SPEECH_PITCH, SPEECH_RATE, SPEECH_VOLUME

logger = logging.getLogger(__name__)

# pyttsx3 expresses rate in words per minute; 1.0 maps to its default
BASE_WORDS_PER_MINUTE = 200

# Seconds between stop() calls while a cancelled playback winds down
STOP_RETRY_INTERVAL = 0.05


@dataclass(frozen=True)
class SpeechUtterance:
    """Text to speak plus playback parameters."""

    text: str
    rate: float = SPEECH_RATE
    pitch: float = SPEECH_PITCH
    volume: float = SPEECH_VOLUME


class SpeechEngine(ABC):
    """Abstract base class for speech output."""

    @abstractmethod
    async def speak(self, utterance: SpeechUtterance) -> None:
        """Speak an utterance. Returns once playback ends or is cancelled."""
        pass

    @abstractmethod
    def cancel_all(self) -> None:
        """Stop the playing utterance and drop anything queued in the engine."""
        pass

    def close(self) -> None:
        """Release engine resources."""
        pass


class NullSpeechEngine(SpeechEngine):
    """Logs captions instead of speaking them (speech disabled)."""

    async def speak(self, utterance: SpeechUtterance) -> None:
        logger.info(f"[speech off] {utterance.text}")

    def cancel_all(self) -> None:
        pass


class Pyttsx3Engine(SpeechEngine):
    """Offline text-to-speech through pyttsx3, run in a worker thread."""

    def __init__(self):
        self._engine = None

    def _get_engine(self):
        """Lazy-init pyttsx3 on first use."""
        if self._engine is None:
            import pyttsx3

            self._engine = pyttsx3.init()
            logger.info("Speech engine initialized (pyttsx3)")
        return self._engine

    def _say_blocking(self, utterance: SpeechUtterance) -> None:
        engine = self._get_engine()
        engine.setProperty("rate", int(BASE_WORDS_PER_MINUTE * utterance.rate))
        engine.setProperty("volume", max(0.0, min(1.0, utterance.volume)))
        # pyttsx3 has no portable pitch control; only 1.0 is supported
        if utterance.pitch != 1.0:
            logger.debug(f"Ignoring pitch {utterance.pitch} (unsupported by pyttsx3)")
        engine.say(utterance.text)
        engine.runAndWait()

    async def speak(self, utterance: SpeechUtterance) -> None:
        """
        Speak in a worker thread.

        Cancelling returns only after runAndWait has returned in that
        thread, so the next utterance never starts over this one.
        """
        logger.debug(f"Speaking: {utterance.text}")
        playback = asyncio.ensure_future(asyncio.to_thread(self._say_blocking, utterance))
        try:
            await asyncio.shield(playback)
        except asyncio.CancelledError:
            # stop() is a no-op until runAndWait has started, so keep asking
            while not playback.done():
                self.cancel_all()
                await asyncio.wait({playback}, timeout=STOP_RETRY_INTERVAL)
            if playback.exception() is not None:
                logger.warning(f"Speech failed while stopping: {playback.exception()}")
            raise

    def cancel_all(self) -> None:
        if self._engine is not None:
            try:
                self._engine.stop()
            except Exception as e:
                logger.warning(f"Speech stop failed: {e}")

    def close(self) -> None:
        self.cancel_all()
        self._engine = None
