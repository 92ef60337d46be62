"""
Service layer to assemble progress summaries and review statistics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from vocab_trainer.analytics.metrics import (
    compute_accuracy,
    compute_reviewed_today,
    compute_streak_days,
    count_by_stage,
    count_due,
    count_learned,
    count_new,
    events_to_frame,
    items_to_frame,
)
from vocab_trainer.analytics.types import LearningStats, ProgressSummary
from vocab_trainer.schemas import LearningStage, VocabularyItem

REVIEW_STAGES = (LearningStage.MASTERED, LearningStage.LONG_TERM_REVIEW)


def build_progress_summary(
    items: Iterable[VocabularyItem],
    now: Optional[datetime] = None
) -> ProgressSummary:
    """
    Count items per learning stage across the whole collection.
    """
    now = now or datetime.now(timezone.utc)
    items_df = items_to_frame(items)
    counts = count_by_stage(items_df)

    return ProgressSummary(
        new=counts[LearningStage.NEW.value],
        passive_learning=counts[LearningStage.PASSIVE_LEARNING.value],
        mastered=counts[LearningStage.MASTERED.value],
        long_term_review=counts[LearningStage.LONG_TERM_REVIEW.value],
        due_for_review=count_due(items_df, now, REVIEW_STAGES),
        total=len(items_df),
    )


def build_learning_stats(
    items: Iterable[VocabularyItem],
    review_events: Iterable[dict] = (),
    now: Optional[datetime] = None
) -> LearningStats:
    """
    Build the review statistics shown on a dashboard.

    Args:
        items: Full vocabulary collection
        review_events: Logged review events (any order)
        now: Reference time (defaults to now)
    """
    now = now or datetime.now(timezone.utc)
    items_df = items_to_frame(items)
    events_df = events_to_frame(review_events)

    return LearningStats(
        total_items=len(items_df),
        due_today=count_due(items_df, now),
        new_items=count_new(items_df),
        learned_items=count_learned(items_df),
        reviewed_today=compute_reviewed_today(events_df, now),
        accuracy_rate=compute_accuracy(events_df),
        streak_days=compute_streak_days(events_df),
        total_reviews=len(events_df),
    )
