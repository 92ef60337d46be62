"""
Playback Session Engine

Plays a bounded working set of vocabulary items as timed audio cycles:

    speak source -> pause -> speak target -> pause

Each full playback counts one exposure and may promote the item
(NEW -> PASSIVE_LEARNING -> MASTERED). Items that reach the mastery
threshold are handed to SM-2 review and leave future working sets.

States:
    IDLE -> ACTIVE -> (PAUSED <-> ACTIVE) -> TERMINATED -> IDLE

Playback runs as a single asyncio task. pause() and stop() cancel it
immediately; resume() starts the current item over from its first step.
Store writes are synchronous, so an item's bookkeeping is never split by
a cancellation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from vocab_trainer.analytics import ProgressSummary, build_progress_summary
from vocab_trainer.errors import (
    ItemNotFound,
    NoEligibleItems,
    SessionAlreadyActive,
    SpeechError,
    StaleItemError,
    StoreError,
)
from vocab_trainer.schemas import PlaybackSession, SessionConfig, VocabularyItem, utc_now
from vocab_trainer.session.events import EventBus, EventType, SessionEvent
from vocab_trainer.session.progression import apply_exposure
from vocab_trainer.session.selection import select_working_set
from vocab_trainer.speech import SpeechProvider
from vocab_trainer.stores.base import VocabularyStore
from vocab_trainer.stores.database import SessionLog

logger = logging.getLogger(__name__)

# Attempts at the read-modify-write of one item before giving up
MAX_SAVE_ATTEMPTS = 3


class EngineState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class Progress:
    """Cursor position within the running session."""
    word_index: int
    repetition_index: int
    working_set_size: int


class SessionEngine:
    """
    Drives one passive-learning playback session at a time.

    Collaborators are injected: the vocabulary store, the speech provider,
    an optional session log for finished sessions, and a clock.
    """

    def __init__(
        self,
        store: VocabularyStore,
        speech: SpeechProvider,
        session_log: Optional[SessionLog] = None,
        clock: Optional[Callable[[], datetime]] = None,
        events: Optional[EventBus] = None,
        config: Optional[SessionConfig] = None
    ):
        self.store = store
        self.speech = speech
        self.session_log = session_log
        self.clock = clock or utc_now
        self.events = events or EventBus()
        self.default_config = config or SessionConfig()

        self._state = EngineState.IDLE
        self._config = self.default_config
        self._session: Optional[PlaybackSession] = None
        self._working_set: list[VocabularyItem] = []
        self._word_index = 0
        self._repetition_index = 0
        self._step_index = 0
        self._task: Optional[asyncio.Task] = None
        self.last_error: Optional[Exception] = None

    # ---- Read-only State ----

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def current_session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def current_item(self) -> Optional[VocabularyItem]:
        if self._state not in (EngineState.ACTIVE, EngineState.PAUSED):
            return None
        return self._working_set[self._word_index]

    @property
    def current_step(self) -> int:
        """Index (0-3) of the playback step in progress for the current item."""
        return self._step_index

    @property
    def working_set(self) -> list[VocabularyItem]:
        return list(self._working_set)

    def get_progress(self) -> Progress:
        return Progress(
            word_index=self._word_index,
            repetition_index=self._repetition_index,
            working_set_size=len(self._working_set),
        )

    def get_progress_summary(self) -> ProgressSummary:
        """Stage counts over the whole collection (independent of any session)."""
        return build_progress_summary(self.store.load_all(), self.clock())

    # ---- Commands ----

    async def start(self, config: Optional[SessionConfig] = None) -> PlaybackSession:
        """
        Start a playback session.

        Args:
            config: Session options (defaults to the engine's config)

        Returns:
            The new session record (playback continues in the background)

        Raises:
            SessionAlreadyActive: If a session is active or paused
            NoEligibleItems: If the collection is empty
        """
        if self._state in (EngineState.ACTIVE, EngineState.PAUSED):
            raise SessionAlreadyActive(self._session.id)

        config = config or self.default_config
        working_set = select_working_set(self.store.load_all(), config.max_items_per_session)
        if not working_set:
            raise NoEligibleItems()

        self._config = config
        self._working_set = working_set
        self._session = PlaybackSession(started_at=self.clock())
        self._word_index = 0
        self._repetition_index = 0
        self._step_index = 0
        self.last_error = None
        self._state = EngineState.ACTIVE

        logger.info(
            "Started playback session %s with %d items x %d repetitions",
            self._session.id, len(working_set), config.repetitions_per_session
        )
        self._spawn_playback()
        return self._session

    def pause(self) -> None:
        """Pause playback; no-op unless a session is active."""
        if self._state is not EngineState.ACTIVE:
            logger.debug("pause() ignored in state %s", self._state.value)
            return

        self._state = EngineState.PAUSED
        self.speech.cancel()
        self._cancel_playback()
        logger.info("Paused playback session %s", self._session.id)
        self._emit(EventType.SESSION_PAUSED)

    def resume(self) -> None:
        """
        Resume a paused session; no-op unless paused.

        The current item is replayed from its first step. Must be called
        from a running event loop.
        """
        if self._state is not EngineState.PAUSED:
            logger.debug("resume() ignored in state %s", self._state.value)
            return

        self._state = EngineState.ACTIVE
        self.last_error = None
        logger.info("Resumed playback session %s", self._session.id)
        self._emit(EventType.SESSION_RESUMED)
        self._spawn_playback()

    async def stop(self) -> Optional[PlaybackSession]:
        """
        Stop the session early and persist it.

        Returns:
            The finalized session, or None if nothing was running

        Raises:
            StoreError: If the session log write fails (the engine is IDLE anyway)
        """
        if self._state not in (EngineState.ACTIVE, EngineState.PAUSED):
            logger.debug("stop() ignored in state %s", self._state.value)
            return None

        self.speech.cancel()
        task = self._task
        self._cancel_playback()
        if task is not None and task is not asyncio.current_task():
            await asyncio.wait([task])

        session = self._session
        session.finalize(self.clock(), completed_normally=False)
        self._state = EngineState.TERMINATED
        try:
            self._persist(session)
        finally:
            self._reset()

        logger.info(
            "Stopped playback session %s after %d items",
            session.id, len(session.item_ids_played)
        )
        return session

    async def wait_closed(self) -> None:
        """
        Wait for the in-flight playback task to finish.

        Returns when the session completes, is paused or is stopped.
        Re-raises unexpected errors from the playback task.
        """
        task = self._task
        if task is None:
            return
        await asyncio.wait([task])
        if not task.cancelled() and task.exception() is not None:
            raise task.exception()

    # ---- Playback ----

    def _spawn_playback(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._play())

    def _cancel_playback(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _play(self) -> None:
        item: Optional[VocabularyItem] = None
        try:
            while self._state is EngineState.ACTIVE:
                if self._is_finished():
                    self._complete()
                    return

                item = self._working_set[self._word_index]
                repetition = self._repetition_index + 1

                self._emit(EventType.ITEM_STARTED, item=item, repetition=repetition)
                await self._play_item(item)

                try:
                    updated = self._record_exposure(item)
                except ItemNotFound:
                    logger.warning("Item %s was removed during playback, skipping it", item.id)
                    self._drop_current_item()
                    continue
                except StoreError as exc:
                    self._pause_on_error(item, exc)
                    return

                self._working_set[self._word_index] = updated
                self._session.record_item(updated.id)
                self._emit(EventType.ITEM_COMPLETED, item=updated, repetition=repetition)
                self._advance_cursor()
        except Exception as exc:
            if self._state is not EngineState.ACTIVE:
                raise
            self._pause_on_error(item, exc)

    async def _play_item(self, item: VocabularyItem) -> None:
        """Run the four playback steps; each await is a cancellation point."""
        config = self._config
        steps = (
            lambda: self._speak(item.source_text, config.source_voice),
            lambda: self._wait(config.word_pause_ms),
            lambda: self._speak(item.target_text, config.target_voice),
            lambda: self._wait(config.inter_word_pause_ms),
        )
        for index, step in enumerate(steps):
            self._step_index = index
            await step()
        self._step_index = 0

    async def _speak(self, text: str, voice_hint: Optional[str]) -> None:
        try:
            await self.speech.speak(text, voice_hint, self._config.speech_rate)
        except SpeechError as exc:
            # Fail soft: a missing utterance must not stall the session
            logger.warning("Speech failed for %r: %s", text, exc)
        except Exception:
            logger.exception("Speech provider error for %r", text)

    async def _wait(self, milliseconds: int) -> None:
        await asyncio.sleep(milliseconds / 1000.0)

    def _record_exposure(self, item: VocabularyItem) -> VocabularyItem:
        """
        Read-modify-write the item's exposure data.

        The item is re-read right before the update and saved with a version
        check, so a concurrent manual review is retried on top of, never
        overwritten.
        """
        for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
            current = self.store.get(item.id)
            if current is None:
                raise ItemNotFound(item.id)

            schedule = apply_exposure(
                current.schedule,
                self._config.exposures_before_mastery,
                self.clock(),
            )
            try:
                return self.store.save(current.with_schedule(schedule))
            except StaleItemError:
                if attempt == MAX_SAVE_ATTEMPTS:
                    raise
                logger.warning(
                    "Item %s changed during playback, retrying update (%d/%d)",
                    item.id, attempt, MAX_SAVE_ATTEMPTS
                )
        raise AssertionError("unreachable")

    def _is_finished(self) -> bool:
        return (
            not self._working_set
            or self._repetition_index >= self._config.repetitions_per_session
        )

    def _advance_cursor(self) -> None:
        self._word_index += 1
        if self._word_index >= len(self._working_set):
            self._next_repetition()

    def _next_repetition(self) -> None:
        self._word_index = 0
        self._repetition_index += 1
        self._session.repetitions_completed = self._repetition_index

    def _drop_current_item(self) -> None:
        """Remove a deleted item from the working set; the cursor moves to the next one."""
        del self._working_set[self._word_index]
        if self._working_set and self._word_index >= len(self._working_set):
            self._next_repetition()

    def _pause_on_error(self, item: Optional[VocabularyItem], exc: Exception) -> None:
        """
        Stop playback on a failed step.

        The cursor stays on the failed item, so resuming replays it and the
        stored progress never runs ahead of or behind the session.
        """
        item_id = item.id if item is not None else None
        logger.error("Playback failed on item %s: %s", item_id, exc, exc_info=exc)
        self.last_error = exc
        self._state = EngineState.PAUSED
        self._emit(EventType.SESSION_PAUSED, item=item, error=exc)

    def _complete(self) -> None:
        session = self._session
        session.finalize(self.clock(), completed_normally=True)
        self._state = EngineState.TERMINATED
        try:
            self._persist(session)
        except StoreError as exc:
            logger.error("Failed to persist playback session %s: %s", session.id, exc, exc_info=exc)
            self.last_error = exc
        self._reset()

        logger.info(
            "Completed playback session %s: %d items, %d repetitions",
            session.id, len(session.item_ids_played), session.repetitions_completed
        )
        self.events.emit(SessionEvent(
            type=EventType.SESSION_COMPLETED,
            session=session,
            timestamp=self.clock(),
        ))

    def _persist(self, session: PlaybackSession) -> None:
        if self.session_log is not None:
            self.session_log.save_session(session)

    def _reset(self) -> None:
        self._state = EngineState.IDLE
        self._session = None
        self._working_set = []
        self._word_index = 0
        self._repetition_index = 0
        self._step_index = 0
        self._task = None

    def _emit(
        self,
        event_type: EventType,
        item: Optional[VocabularyItem] = None,
        repetition: Optional[int] = None,
        error: Optional[Exception] = None
    ) -> None:
        self.events.emit(SessionEvent(
            type=event_type,
            session=self._session,
            item=item,
            repetition=repetition,
            error=error,
            timestamp=self.clock(),
        ))
