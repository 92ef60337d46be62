"""
Manual review processing.

Grades an item with SM-2, saves it and logs the review event. The caller
is responsible for presenting the card and collecting the grade.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from vocab_trainer import sm2
from vocab_trainer.errors import ItemNotFound, StaleItemError
from vocab_trainer.schemas import LearningStage, ScheduleState, VocabularyItem
from vocab_trainer.stores.base import VocabularyStore
from vocab_trainer.stores.database import SessionLog

logger = logging.getLogger(__name__)

MAX_SAVE_ATTEMPTS = 3


def review_schedule(state: ScheduleState, quality: int, now: datetime) -> ScheduleState:
    """
    SM-2 update plus the stage change a manual review can cause.

    A successful review of a MASTERED item moves it to LONG_TERM_REVIEW.
    Failures never move an item back a stage.
    """
    updated = sm2.advance(state, quality, now)
    if state.learning_stage == LearningStage.MASTERED and quality >= sm2.PASSING_QUALITY:
        updated = updated.evolve(learning_stage=LearningStage.LONG_TERM_REVIEW)
    return updated


def build_review_event(
    before: ScheduleState,
    after: ScheduleState,
    item_id: str,
    quality: int,
    timestamp: datetime,
    response_time_ms: Optional[int] = None
) -> dict:
    return {
        "item_id": item_id,
        "timestamp": timestamp,
        "quality": int(quality),
        "response_time_ms": response_time_ms,
        "interval_before": before.interval_days,
        "ease_factor_before": before.ease_factor,
        "repetition_count_before": before.repetition_count,
        "interval_after": after.interval_days,
        "ease_factor_after": after.ease_factor,
        "repetition_count_after": after.repetition_count,
        "learning_stage": after.learning_stage.value,
    }


def process_review(
    store: VocabularyStore,
    item_id: str,
    quality: int,
    response_time_ms: Optional[int] = None,
    session_log: Optional[SessionLog] = None,
    now: Optional[datetime] = None
) -> Tuple[VocabularyItem, dict]:
    """
    Grade one item, save it and log the event.

    The item is re-read and the grade re-applied if a playback session saved
    it in between (optimistic version check).

    Args:
        store: Vocabulary store
        item_id: Item to grade
        quality: Review quality 0-5
        response_time_ms: Time the learner took to answer
        session_log: Where to log the review event (optional)
        now: Review timestamp (defaults to now)

    Returns:
        Tuple of (saved_item, event_data_dict)

    Raises:
        ValueError: If quality is out of range
        ItemNotFound: If the item does not exist
        StaleItemError: If the item kept changing for every attempt
    """
    sm2.validate_quality(quality)
    now = now or datetime.now(timezone.utc)

    for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
        item = store.get(item_id)
        if item is None:
            raise ItemNotFound(item_id)

        schedule = review_schedule(item.schedule, quality, now)
        try:
            saved = store.save(item.with_schedule(schedule))
            break
        except StaleItemError:
            if attempt == MAX_SAVE_ATTEMPTS:
                raise
            logger.warning("Item %s changed during review, retrying (%d/%d)", item_id, attempt, MAX_SAVE_ATTEMPTS)

    event = build_review_event(item.schedule, saved.schedule, item_id, quality, now, response_time_ms)
    if session_log is not None:
        session_log.log_review_event(event)

    logger.info(
        "Reviewed %s: quality=%d interval=%dd ease=%.2f",
        item_id, quality, saved.schedule.interval_days, saved.schedule.ease_factor
    )
    return saved, event


def reset_item(
    store: VocabularyStore,
    item_id: str,
    now: Optional[datetime] = None
) -> VocabularyItem:
    """
    Reset an item's progress (SM-2 and passive learning) to a fresh start.

    Raises:
        ItemNotFound: If the item does not exist
    """
    item = store.get(item_id)
    if item is None:
        raise ItemNotFound(item_id)
    return store.save(item.with_schedule(sm2.reset_progress(item.schedule, now)))
