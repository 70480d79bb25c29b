"""
Unit tests for live_vision.speech.engine.

pyttsx3 is swapped for a mock module so no audio device is touched.
"""

from unittest.mock import MagicMock, patch

import pytest

from live_vision.speech.engine import (
    BASE_WORDS_PER_MINUTE,
    NullSpeechEngine,
    Pyttsx3Engine,
    SpeechUtterance,
)


@pytest.fixture
def mock_pyttsx3():
    module = MagicMock()
    with patch.dict("sys.modules", {"pyttsx3": module}):
        yield module


class TestNullSpeechEngine:
    """Tests for the silent engine."""

    @pytest.mark.asyncio
    async def test_speak_does_nothing(self):
        engine = NullSpeechEngine()
        await engine.speak(SpeechUtterance("a dog"))
        engine.cancel_all()
        engine.close()


class TestPyttsx3Engine:
    """Tests for Pyttsx3Engine."""

    def test_lazy_init(self, mock_pyttsx3):
        Pyttsx3Engine()
        mock_pyttsx3.init.assert_not_called()

    @pytest.mark.asyncio
    async def test_speak_sets_properties(self, mock_pyttsx3):
        driver = mock_pyttsx3.init.return_value
        engine = Pyttsx3Engine()

        await engine.speak(SpeechUtterance("a dog", rate=1.5, volume=0.8))

        driver.setProperty.assert_any_call("rate", int(BASE_WORDS_PER_MINUTE * 1.5))
        driver.setProperty.assert_any_call("volume", 0.8)
        driver.say.assert_called_once_with("a dog")
        driver.runAndWait.assert_called_once()

    @pytest.mark.asyncio
    async def test_volume_is_clamped(self, mock_pyttsx3):
        driver = mock_pyttsx3.init.return_value
        await Pyttsx3Engine().speak(SpeechUtterance("loud", volume=3.0))
        driver.setProperty.assert_any_call("volume", 1.0)

    @pytest.mark.asyncio
    async def test_driver_reused(self, mock_pyttsx3):
        engine = Pyttsx3Engine()
        await engine.speak(SpeechUtterance("one"))
        await engine.speak(SpeechUtterance("two"))
        mock_pyttsx3.init.assert_called_once()

    def test_cancel_before_init_is_noop(self, mock_pyttsx3):
        Pyttsx3Engine().cancel_all()
        mock_pyttsx3.init.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_stops_driver(self, mock_pyttsx3):
        driver = mock_pyttsx3.init.return_value
        engine = Pyttsx3Engine()
        await engine.speak(SpeechUtterance("a dog"))

        engine.cancel_all()
        driver.stop.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_failure_is_logged(self, mock_pyttsx3):
        driver = mock_pyttsx3.init.return_value
        driver.stop.side_effect = RuntimeError("not running")
        engine = Pyttsx3Engine()
        await engine.speak(SpeechUtterance("a dog"))

        engine.cancel_all()

    @pytest.mark.asyncio
    async def test_close_drops_driver(self, mock_pyttsx3):
        engine = Pyttsx3Engine()
        await engine.speak(SpeechUtterance("a dog"))
        engine.close()
        assert engine._engine is None
