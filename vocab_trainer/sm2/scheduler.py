"""
Scheduler - SM-2 Algorithm Logic

Pure SM-2 scheduling and state updates (no database calls).

Main workflow:
1. Load the item (caller's responsibility)
2. Grade the review (quality 0-5)
3. advance() returns the new schedule state
4. Save the item (caller's responsibility)

Every function takes an optional `now` so results are reproducible:
the same (state, quality, now) always yields the same state.
"""

from __future__ import annotations
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from vocab_trainer.schemas import LearningStage, ScheduleState
from vocab_trainer.sm2.constants import (
    FAIL_EASE_PENALTY,
    FIRST_INTERVAL_DAYS,
    INITIAL_EASE_FACTOR,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    ONE_DAY,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def validate_quality(quality: int) -> int:
    """
    Check a review grade.

    Raises:
        ValueError: If quality is not an integer in 0..5
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ValueError(f"Review quality must be an integer 0-{MAX_QUALITY}, got {quality!r}")
    if not 0 <= quality <= MAX_QUALITY:
        raise ValueError(f"Review quality must be between 0 and {MAX_QUALITY}, got {quality}")
    return int(quality)


def calculate_ease_factor(ease_factor: float, quality: int) -> float:
    """
    Update the ease factor after a successful review.

    Formula:
        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

    Quality 5 adds 0.1, quality 4 leaves EF unchanged, quality 3 subtracts 0.14.
    The result never drops below MIN_EASE_FACTOR.

    Args:
        ease_factor: Current ease factor
        quality: Review quality (3-5)

    Returns:
        New ease factor
    """
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def calculate_interval(repetition_count: int, interval_days: int, ease_factor: float) -> int:
    """
    Interval (days) after a successful review.

    Args:
        repetition_count: Repetition count including this review
        interval_days: Previous interval
        ease_factor: Ease factor before this review's update

    Returns:
        1 for the first repetition, 6 for the second, round(I * EF) afterwards
    """
    if repetition_count == 1:
        return FIRST_INTERVAL_DAYS
    if repetition_count == 2:
        return SECOND_INTERVAL_DAYS
    return _round_half_up(interval_days * ease_factor)


def advance(
    state: ScheduleState,
    quality: int,
    now: Optional[datetime] = None
) -> ScheduleState:
    """
    Apply one graded review and return the updated schedule state.

    Failure (quality < 3):
    - repetition count resets to 0, interval to 1 day
    - ease factor drops by FAIL_EASE_PENALTY (never below 1.3)

    Success (quality >= 3):
    - repetition count increments, interval follows 1, 6, round(I * EF)
    - ease factor updated with the SM-2 formula

    Learning stage and exposure fields are left untouched.

    Args:
        state: Current schedule state (not modified)
        quality: Review quality 0-5
        now: Review timestamp (defaults to now)

    Returns:
        New ScheduleState
    """
    quality = validate_quality(quality)
    now = _now(now)

    if quality < PASSING_QUALITY:
        repetition_count = 0
        interval_days = FIRST_INTERVAL_DAYS
        ease_factor = max(MIN_EASE_FACTOR, state.ease_factor - FAIL_EASE_PENALTY)
    else:
        repetition_count = state.repetition_count + 1
        interval_days = calculate_interval(repetition_count, state.interval_days, state.ease_factor)
        ease_factor = calculate_ease_factor(state.ease_factor, quality)

    return state.evolve(
        repetition_count=repetition_count,
        interval_days=interval_days,
        ease_factor=ease_factor,
        next_review_at=now + timedelta(days=interval_days),
        last_reviewed_at=now,
        updated_at=now,
    )


def create_initial(now: Optional[datetime] = None) -> ScheduleState:
    """
    Initialize state for a new item (never seen before).

    The item is due immediately and enters passive learning as NEW.
    """
    now = _now(now)
    return ScheduleState(
        interval_days=0,
        repetition_count=0,
        ease_factor=INITIAL_EASE_FACTOR,
        next_review_at=now,
        last_reviewed_at=None,
        created_at=now,
        updated_at=now,
        learning_stage=LearningStage.NEW,
        exposure_count=0,
    )


def reset_progress(state: ScheduleState, now: Optional[datetime] = None) -> ScheduleState:
    """
    Explicit reset: SM-2 fields and passive-learning progress start over.

    This is the only path that moves an item back to an earlier stage.
    """
    now = _now(now)
    return state.evolve(
        interval_days=0,
        repetition_count=0,
        ease_factor=INITIAL_EASE_FACTOR,
        next_review_at=now,
        last_reviewed_at=None,
        updated_at=now,
        learning_stage=LearningStage.NEW,
        exposure_count=0,
        last_session_at=None,
        mastered_at=None,
    )


def graduate(state: ScheduleState, now: Optional[datetime] = None) -> ScheduleState:
    """
    Hand a passively mastered item over to long-term SM-2 review.

    The item is marked MASTERED and scheduled as if it were about to get its
    first review: interval 1 day, repetition count 0, due tomorrow. The ease
    factor is kept.
    """
    now = _now(now)
    return state.evolve(
        learning_stage=LearningStage.MASTERED,
        mastered_at=now,
        interval_days=FIRST_INTERVAL_DAYS,
        repetition_count=0,
        next_review_at=now + ONE_DAY,
        updated_at=now,
    )
