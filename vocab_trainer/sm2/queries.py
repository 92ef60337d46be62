"""
Schedule Queries - read-only helpers over schedule state

Stateless predicates and filters for stores and UIs that need to ask
"what is due?" without touching the scheduler.
"""

from __future__ import annotations
import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from vocab_trainer.schemas import ScheduleState, VocabularyItem
from vocab_trainer.sm2.constants import LEARNED_REPETITIONS


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def is_due(state: ScheduleState, now: Optional[datetime] = None) -> bool:
    """True when the next review time has been reached."""
    return state.next_review_at <= _now(now)


def is_new(state: ScheduleState) -> bool:
    """True when the item has never been reviewed."""
    return state.repetition_count == 0 and state.last_reviewed_at is None


def is_learned(state: ScheduleState, threshold: int = LEARNED_REPETITIONS) -> bool:
    """True after `threshold` consecutive successful reviews."""
    return state.repetition_count >= threshold


def get_due_items(
    items: Iterable[VocabularyItem],
    now: Optional[datetime] = None
) -> list[VocabularyItem]:
    now = _now(now)
    return [item for item in items if is_due(item.schedule, now)]


def get_new_items(items: Iterable[VocabularyItem]) -> list[VocabularyItem]:
    return [item for item in items if is_new(item.schedule)]


def get_learned_items(
    items: Iterable[VocabularyItem],
    threshold: int = LEARNED_REPETITIONS
) -> list[VocabularyItem]:
    return [item for item in items if is_learned(item.schedule, threshold)]


def days_until_review(state: ScheduleState, now: Optional[datetime] = None) -> int:
    """
    Whole days until the next review, rounded up.

    Returns:
        Days remaining (0 or negative when due or overdue)
    """
    remaining = (state.next_review_at - _now(now)).total_seconds() / 86400.0
    return math.ceil(remaining)


def format_interval(interval_days: int) -> str:
    """
    Human-readable interval.

    Examples: "Less than a day", "1 day", "12 days", "2 months", "1 year"
    """
    if interval_days < 1:
        return "Less than a day"
    if interval_days == 1:
        return "1 day"
    if interval_days < 30:
        return f"{interval_days} days"
    if interval_days < 365:
        months = round(interval_days / 30)
        return "1 month" if months == 1 else f"{months} months"
    years = round(interval_days / 365)
    return "1 year" if years == 1 else f"{years} years"


def difficulty_level(ease_factor: float) -> str:
    """Difficulty label derived from the ease factor."""
    if ease_factor >= 2.5:
        return "Easy"
    if ease_factor >= 2.0:
        return "Normal"
    if ease_factor >= 1.7:
        return "Hard"
    return "Very Hard"
