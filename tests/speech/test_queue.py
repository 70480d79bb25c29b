"""
Unit tests for live_vision.speech.queue.
"""

import asyncio
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from live_vision.speech.engine import Pyttsx3Engine
from live_vision.speech.queue import SpeechQueue
from tests.fakes import FakeSpeechEngine, settle


class TestEnqueue:
    """Tests for SpeechQueue.enqueue."""

    @pytest.mark.asyncio
    async def test_speaks_text_with_parameters(self):
        engine = FakeSpeechEngine()
        queue = SpeechQueue(engine, gap=0, rate=1.2, pitch=1.0, volume=0.5)

        utterance = queue.enqueue("a dog")
        await queue.wait_idle()

        assert engine.spoken == ["a dog"]
        assert (utterance.rate, utterance.pitch, utterance.volume) == (1.2, 1.0, 0.5)
        assert queue.is_busy is False
        assert queue.active is None

    @pytest.mark.asyncio
    async def test_new_caption_replaces_current(self):
        """The playing utterance is cancelled before the next one starts."""
        engine = FakeSpeechEngine(duration=1.0)
        queue = SpeechQueue(engine, gap=0)

        queue.enqueue("a dog")
        await settle()
        assert queue.active.text == "a dog"

        queue.enqueue("a cat")
        await settle()

        assert engine.spoken == ["a dog", "a cat"]
        assert engine.max_playing == 1
        assert engine.cancel_calls == 2
        assert queue.active.text == "a cat"
        await queue.close()

    @pytest.mark.asyncio
    async def test_burst_never_overlaps(self):
        """Rapid captions never play two utterances at once."""
        engine = FakeSpeechEngine(duration=0.01)
        queue = SpeechQueue(engine, gap=0.001)

        for text in ("one", "two", "three", "four"):
            queue.enqueue(text)
            await asyncio.sleep(0.002)
        await queue.wait_idle()

        assert engine.max_playing == 1
        assert engine.spoken[-1] == "four"

    @pytest.mark.asyncio
    async def test_gap_before_speaking(self):
        engine = FakeSpeechEngine()
        queue = SpeechQueue(engine, gap=0.05)

        queue.enqueue("a dog")
        await settle()
        assert engine.spoken == []

        await queue.wait_idle()
        assert engine.spoken == ["a dog"]

    @pytest.mark.asyncio
    async def test_engine_failure_is_contained(self):
        engine = FakeSpeechEngine()

        async def broken(utterance):
            raise RuntimeError("audio device busy")

        engine.speak = broken
        queue = SpeechQueue(engine, gap=0)

        queue.enqueue("a dog")
        await queue.wait_idle()

        assert queue.active is None
        assert queue.is_busy is False


class TestCancel:
    """Tests for cancel and close."""

    @pytest.mark.asyncio
    async def test_cancel_stops_playback(self):
        engine = FakeSpeechEngine(duration=1.0)
        queue = SpeechQueue(engine, gap=0)
        queue.enqueue("a dog")
        await settle()

        queue.cancel()
        await settle()

        assert engine.playing == 0
        assert queue.active is None
        assert queue.is_busy is False

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_utterance(self):
        """An utterance still in its gap is never spoken."""
        engine = FakeSpeechEngine()
        queue = SpeechQueue(engine, gap=0.05)
        queue.enqueue("a dog")

        queue.cancel()
        await asyncio.sleep(0.1)

        assert engine.spoken == []

    @pytest.mark.asyncio
    async def test_close_closes_engine(self):
        engine = FakeSpeechEngine(duration=1.0)
        queue = SpeechQueue(engine, gap=0)
        queue.enqueue("a dog")
        await settle()

        await queue.close()

        assert engine.closed is True
        assert engine.playing == 0

    @pytest.mark.asyncio
    async def test_wait_idle_when_nothing_queued(self):
        await SpeechQueue(FakeSpeechEngine()).wait_idle()


class BlockingDriver:
    """pyttsx3 stand-in whose runAndWait holds its worker thread."""

    def __init__(self, duration: float = 0.3, linger: float = 0.05):
        self.duration = duration
        self.linger = linger
        self.said = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._text = None

    def setProperty(self, name, value):
        pass

    def say(self, text):
        self._text = text

    def runAndWait(self):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.said.append(self._text)
            # stop() only affects a loop that is already running
            self._stopped.clear()
        self._stopped.wait(self.duration)
        # audio output drains after stop() returns
        time.sleep(self.linger)
        with self._lock:
            self.active -= 1

    def stop(self):
        self._stopped.set()


@pytest.fixture
def blocking_driver():
    driver = BlockingDriver()
    module = MagicMock()
    module.init.return_value = driver
    with patch.dict("sys.modules", {"pyttsx3": module}):
        yield driver


async def wait_for_playback(driver: BlockingDriver, text: str):
    while text not in driver.said:
        await asyncio.sleep(0.005)


class TestThreadedPlayback:
    """Replacing speech on a thread-backed engine waits for the thread."""

    @pytest.mark.asyncio
    async def test_replacement_waits_for_worker_thread(self, blocking_driver):
        queue = SpeechQueue(Pyttsx3Engine(), gap=0)

        queue.enqueue("a dog")
        await wait_for_playback(blocking_driver, "a dog")
        queue.enqueue("a cat")
        await queue.wait_idle()

        assert blocking_driver.said == ["a dog", "a cat"]
        assert blocking_driver.max_active == 1
        assert blocking_driver.active == 0
        await queue.close()

    @pytest.mark.asyncio
    async def test_burst_on_worker_thread_never_overlaps(self, blocking_driver):
        queue = SpeechQueue(Pyttsx3Engine(), gap=0)

        queue.enqueue("a dog")
        await wait_for_playback(blocking_driver, "a dog")
        queue.enqueue("a cat")
        queue.enqueue("a bird")
        await queue.wait_idle()

        assert blocking_driver.max_active == 1
        assert blocking_driver.said[-1] == "a bird"
        await queue.close()

    @pytest.mark.asyncio
    async def test_close_waits_for_worker_thread(self, blocking_driver):
        queue = SpeechQueue(Pyttsx3Engine(), gap=0)

        queue.enqueue("a dog")
        await wait_for_playback(blocking_driver, "a dog")
        await queue.close()

        assert blocking_driver.active == 0
