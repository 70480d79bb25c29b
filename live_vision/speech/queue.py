"""
Speech Queue

Announces captions one at a time. A new caption replaces whatever is being
spoken: the engine is told to stop, the previous playback task is cancelled
and awaited, and only then, after a short gap, does the new utterance start.
"""

import asyncio
import logging
from typing import Optional

from ..config import SPEECH_GAP_MS, SPEECH_PITCH, SPEECH_RATE, SPEECH_VOLUME
from .engine import SpeechEngine, SpeechUtterance

logger = logging.getLogger(__name__)


class SpeechQueue:
    """Cancel-and-replace queue in front of a SpeechEngine."""

    def __init__(
        self,
        engine: SpeechEngine,
        gap: float = SPEECH_GAP_MS / 1000,
        rate: float = SPEECH_RATE,
        pitch: float = SPEECH_PITCH,
        volume: float = SPEECH_VOLUME,
    ):
        """
        Initialize speech queue.

        Args:
            engine: Speech engine to drive
            gap: Seconds to wait between cancelling and speaking
            rate: Playback rate for every utterance
            pitch: Playback pitch for every utterance
            volume: Playback volume for every utterance
        """
        self.engine = engine
        self.gap = gap
        self.rate = rate
        self.pitch = pitch
        self.volume = volume

        self._task: Optional[asyncio.Task] = None
        self._active: Optional[SpeechUtterance] = None
        self._unfinished: set[asyncio.Task] = set()

    @property
    def active(self) -> Optional[SpeechUtterance]:
        """Utterance currently handed to the engine, if any."""
        return self._active

    @property
    def is_busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def enqueue(self, text: str) -> SpeechUtterance:
        """
        Speak text, replacing anything in progress.

        Must be called from the running event loop.
        """
        utterance = SpeechUtterance(text, rate=self.rate, pitch=self.pitch, volume=self.volume)
        previous = self._interrupt()
        if previous:
            logger.debug(f"Interrupting speech for: {text}")
        self._task = asyncio.create_task(self._play(utterance, previous))
        self._unfinished.add(self._task)
        self._task.add_done_callback(self._unfinished.discard)
        return utterance

    def cancel(self) -> None:
        """Stop the current utterance and drop any pending one."""
        if self._interrupt():
            logger.debug("Speech cancelled")
        self._task = None
        self._active = None

    def _interrupt(self) -> set[asyncio.Task]:
        """Stop the engine and cancel the latest playback; return all unfinished ones."""
        self.engine.cancel_all()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return set(self._unfinished)

    async def _play(self, utterance: SpeechUtterance, previous: set[asyncio.Task]) -> None:
        if previous:
            # Every earlier playback must have stopped, even if this one
            # is replaced while waiting
            try:
                await asyncio.wait(previous)
            except asyncio.CancelledError:
                await asyncio.wait(previous)
                raise

        await asyncio.sleep(self.gap)

        self._active = utterance
        try:
            await self.engine.speak(utterance)
        except Exception as e:
            logger.warning(f"Speech failed: {e}")
        finally:
            if self._active is utterance:
                self._active = None

    async def wait_idle(self) -> None:
        """Wait until the current utterance has been spoken."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def close(self) -> None:
        """Cancel speech and wait for every playback task to finish."""
        self.cancel()
        if self._unfinished:
            await asyncio.wait(set(self._unfinished))
        self.engine.close()
