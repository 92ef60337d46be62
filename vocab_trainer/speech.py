"""
Speech capability contract.

The session engine only needs two things from a text-to-speech backend:
speak an utterance and tell when it finished, and cancel whatever is being
spoken right now.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class SpeechProvider(ABC):
    """
    Abstract base class for speech backends.

    Subclasses should implement:
    - speak()
    - cancel()
    """

    @abstractmethod
    async def speak(self, text: str, voice_hint: Optional[str] = None, rate: float = 1.0) -> None:
        """
        Speak text and return once the utterance has finished.

        Args:
            text: Text to speak
            voice_hint: Language tag or voice name (None = backend default)
            rate: Speaking rate, 1.0 is normal speed

        Raises:
            SpeechError: If the utterance could not be spoken
        """
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Stop the current utterance immediately."""
        pass


class LoggingSpeechProvider(SpeechProvider):
    """
    Speech backend that logs utterances instead of playing audio.

    Each utterance takes a fixed amount of time per character so headless
    runs keep a realistic pace. Set seconds_per_char=0 for instant playback.
    """

    def __init__(self, seconds_per_char: float = 0.06):
        self.seconds_per_char = seconds_per_char
        self.spoken: list[tuple[str, Optional[str]]] = []

    async def speak(self, text: str, voice_hint: Optional[str] = None, rate: float = 1.0) -> None:
        logger.info("speak [%s x%.1f]: %s", voice_hint or "default", rate, text)
        self.spoken.append((text, voice_hint))
        await asyncio.sleep(len(text) * self.seconds_per_char / rate)

    def cancel(self) -> None:
        logger.debug("speech cancelled")
