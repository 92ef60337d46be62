import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from vocab_trainer import sm2
from vocab_trainer.errors import SpeechError
from vocab_trainer.schemas import LearningStage, SessionConfig, VocabularyItem
from vocab_trainer.speech import SpeechProvider
from vocab_trainer.stores.database import SessionLog
from vocab_trainer.stores.memory import InMemoryVocabularyStore


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ScriptedSpeech(SpeechProvider):
    """
    Records utterances. Texts in `fail_on` raise SpeechError; texts in
    `block_on` wait until release() is called (or the task is cancelled).
    """

    def __init__(self, fail_on=(), block_on=()):
        self.spoken = []
        self.voices = []
        self.rates = []
        self.cancel_count = 0
        self.fail_on = set(fail_on)
        self.block_on = set(block_on)
        self._gate = asyncio.Event()

    async def speak(self, text, voice_hint=None, rate=1.0):
        self.spoken.append(text)
        self.voices.append(voice_hint)
        self.rates.append(rate)
        if text in self.fail_on:
            raise SpeechError(f"cannot speak {text}")
        if text in self.block_on:
            await self._gate.wait()
        else:
            await asyncio.sleep(0)

    def cancel(self):
        self.cancel_count += 1

    def release(self):
        self.block_on.clear()
        self._gate.set()


async def settle(rounds=10):
    """Let the playback task run until it blocks."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_item(clock):
    """Factory for vocabulary items with a given stage and exposure count."""

    def _make(index, stage=LearningStage.NEW, exposure_count=0, **schedule_changes):
        schedule = sm2.create_initial(clock()).evolve(
            learning_stage=stage,
            exposure_count=exposure_count,
            **schedule_changes,
        )
        return VocabularyItem(
            id=f"item-{index}",
            source_text=f"src{index}",
            target_text=f"tgt{index}",
            tags={"test"},
            schedule=schedule,
        )

    return _make


@pytest.fixture
def store(make_item):
    return InMemoryVocabularyStore([make_item(i) for i in range(3)])


@pytest.fixture
def speech():
    return ScriptedSpeech()


@pytest.fixture
def fast_config():
    return SessionConfig(
        repetitions_per_session=2,
        word_pause_ms=0,
        inter_word_pause_ms=0,
        max_items_per_session=10,
    )


@pytest.fixture
def session_log():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    log = SessionLog(engine)
    log.init_db()
    return log
