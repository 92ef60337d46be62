"""
Pydantic models for vocabulary items, schedule state and playback sessions.

These models define the structure of store documents and the values passed
between the scheduler, the session engine and the storage adapters.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Configuration
MIN_EASE_FACTOR = 1.3
INITIAL_EASE_FACTOR = 2.5


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite, Mongo without tz_aware) as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class LearningStage(str, Enum):
    """Passive-learning progression of an item (ordered)."""
    NEW = "new"
    PASSIVE_LEARNING = "passive_learning"
    MASTERED = "mastered"
    LONG_TERM_REVIEW = "long_term_review"

    @property
    def rank(self) -> int:
        return list(LearningStage).index(self)


# Stages picked up by playback sessions
PLAYBACK_STAGES = frozenset({LearningStage.NEW, LearningStage.PASSIVE_LEARNING})


# ---- Schedule State ----

class ScheduleState(BaseModel):
    """
    Spaced-repetition record embedded in every vocabulary item.

    Holds both the SM-2 fields (interval, repetitions, ease factor) and the
    passive-learning fields (stage, exposure count).
    """
    interval_days: int = Field(default=0, ge=0)
    repetition_count: int = Field(default=0, ge=0)
    ease_factor: float = Field(default=INITIAL_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    next_review_at: datetime
    last_reviewed_at: Optional[datetime] = None  # None = never reviewed
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Passive learning (older documents lack these and load as NEW / 0)
    learning_stage: LearningStage = LearningStage.NEW
    exposure_count: int = Field(default=0, ge=0)
    last_session_at: Optional[datetime] = None
    mastered_at: Optional[datetime] = None

    @field_validator(
        "next_review_at", "last_reviewed_at", "created_at", "updated_at",
        "last_session_at", "mastered_at",
    )
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    @model_validator(mode="after")
    def _check_review_order(self) -> "ScheduleState":
        if self.last_reviewed_at is not None and self.next_review_at < self.last_reviewed_at:
            raise ValueError("next_review_at must not precede last_reviewed_at")
        return self

    def evolve(self, **changes: Any) -> "ScheduleState":
        """Return a validated copy with the given fields replaced."""
        return ScheduleState.model_validate({**self.model_dump(), **changes})


# ---- Vocabulary Item ----

class VocabularyItem(BaseModel):
    """
    A learnable source/target pair.

    `version` is incremented by the store on every save and checked against
    the stored copy, so concurrent writers cannot silently overwrite each other.
    """
    id: str
    source_text: str
    target_text: str
    tags: set[str] = Field(default_factory=set)
    schedule: ScheduleState
    version: int = Field(default=0, ge=0)

    def with_schedule(self, schedule: ScheduleState) -> "VocabularyItem":
        return self.model_copy(update={"schedule": schedule})


# ---- Session Configuration ----

class SessionConfig(BaseModel):
    """Options for one passive-learning playback session."""
    model_config = ConfigDict(frozen=True)

    repetitions_per_session: int = Field(default=3, ge=2, le=5)
    word_pause_ms: int = Field(default=800, ge=0, description="Gap between source and target audio")
    inter_word_pause_ms: int = Field(default=1200, ge=0, description="Gap between items")
    max_items_per_session: int = Field(default=15, ge=10, le=25)
    speech_rate: float = Field(default=1.0, ge=0.5, le=2.0)
    exposures_before_mastery: int = Field(default=5, ge=1)

    # Voice hints handed to the speech provider (None = provider default)
    source_voice: Optional[str] = None
    target_voice: Optional[str] = None


# ---- Playback Session ----

class PlaybackSession(BaseModel):
    """
    Record of one playback run.

    `item_ids_played` keeps first-play order; an id is only recorded once no
    matter how many repetition passes play it.
    """
    id: str = Field(default_factory=lambda: f"playback-{uuid.uuid4()}")
    started_at: datetime
    ended_at: Optional[datetime] = None  # None while active
    item_ids_played: list[str] = Field(default_factory=list)
    repetitions_completed: int = Field(default=0, ge=0)
    completed_normally: bool = False

    @field_validator("started_at", "ended_at")
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    @property
    def is_finalized(self) -> bool:
        return self.ended_at is not None

    @property
    def duration_ms(self) -> Optional[int]:
        if self.ended_at is None:
            return None
        return int((self.ended_at - self.started_at).total_seconds() * 1000)

    def record_item(self, item_id: str) -> bool:
        """
        Record that an item was played.

        Returns:
            True if the id was new to this session
        """
        if item_id in self.item_ids_played:
            return False
        self.item_ids_played.append(item_id)
        return True

    def finalize(self, ended_at: datetime, completed_normally: bool) -> None:
        self.ended_at = ended_at
        self.completed_normally = completed_normally
