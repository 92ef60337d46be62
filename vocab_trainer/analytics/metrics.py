"""
Metric computations for progress and review statistics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

import pandas as pd

from vocab_trainer.schemas import LearningStage, VocabularyItem
from vocab_trainer.sm2.constants import LEARNED_REPETITIONS, PASSING_QUALITY

ITEM_COLUMNS = ["item_id", "learning_stage", "next_review_at", "last_reviewed_at", "repetition_count"]
EVENT_COLUMNS = ["item_id", "timestamp", "quality", "day_utc"]

ACCURACY_WINDOW = 50  # Most recent graded reviews used for accuracy


def items_to_frame(items: Iterable[VocabularyItem]) -> pd.DataFrame:
    """
    Flatten items into one row per item.
    """
    rows = [
        {
            "item_id": item.id,
            "learning_stage": item.schedule.learning_stage.value,
            "next_review_at": item.schedule.next_review_at,
            "last_reviewed_at": item.schedule.last_reviewed_at,
            "repetition_count": item.schedule.repetition_count,
        }
        for item in items
    ]
    if not rows:
        return pd.DataFrame(columns=ITEM_COLUMNS)

    df = pd.DataFrame(rows, columns=ITEM_COLUMNS)
    df["next_review_at"] = pd.to_datetime(df["next_review_at"], utc=True)
    df["last_reviewed_at"] = pd.to_datetime(df["last_reviewed_at"], utc=True)
    return df


def events_to_frame(events: Iterable[dict]) -> pd.DataFrame:
    """
    Load review events into a dataframe sorted by time (oldest first).
    """
    rows = list(events)
    if not rows:
        return pd.DataFrame(columns=EVENT_COLUMNS)

    df = pd.DataFrame(rows)
    df = df[["item_id", "timestamp", "quality"]].copy()
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
    df = df.dropna(subset=["timestamp"])
    df["day_utc"] = df["timestamp"].dt.floor("D")
    return df.sort_values("timestamp").reset_index(drop=True)


def count_by_stage(items_df: pd.DataFrame) -> dict[str, int]:
    """
    Number of items per learning stage (every stage present, zero-filled).
    """
    stages = [stage.value for stage in LearningStage]
    if items_df.empty:
        return {stage: 0 for stage in stages}
    counts = items_df["learning_stage"].value_counts().reindex(stages, fill_value=0)
    return {stage: int(count) for stage, count in counts.items()}


def count_due(items_df: pd.DataFrame, now: datetime, stages: Iterable[LearningStage] = ()) -> int:
    """
    Items whose next review is at or before `now`, optionally limited to stages.
    """
    if items_df.empty:
        return 0
    due = items_df["next_review_at"] <= pd.Timestamp(now)
    stage_values = [stage.value for stage in stages]
    if stage_values:
        due &= items_df["learning_stage"].isin(stage_values)
    return int(due.sum())


def count_new(items_df: pd.DataFrame) -> int:
    """Items never reviewed."""
    if items_df.empty:
        return 0
    return int(((items_df["repetition_count"] == 0) & items_df["last_reviewed_at"].isna()).sum())


def count_learned(items_df: pd.DataFrame, threshold: int = LEARNED_REPETITIONS) -> int:
    if items_df.empty:
        return 0
    return int((items_df["repetition_count"] >= threshold).sum())


def compute_accuracy(events_df: pd.DataFrame, window: int = ACCURACY_WINDOW) -> float:
    """
    Share of passing grades among the most recent `window` reviews.
    """
    if events_df.empty:
        return 0.0
    recent = events_df.tail(window)
    return float((recent["quality"] >= PASSING_QUALITY).mean())


def compute_reviewed_today(events_df: pd.DataFrame, now: datetime) -> int:
    if events_df.empty:
        return 0
    today = pd.Timestamp(now).tz_convert("UTC").floor("D")
    return int((events_df["day_utc"] == today).sum())


def compute_streak_days(events_df: pd.DataFrame) -> int:
    """
    Number of distinct UTC days with at least one review.
    """
    if events_df.empty:
        return 0
    return int(events_df["day_utc"].nunique())
