"""
Types for progress reporting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProgressSummary:
    """
    Item counts per learning stage across the whole collection.

    `due_for_review` counts items past passive learning whose SM-2 review
    is due.
    """
    new: int
    passive_learning: int
    mastered: int
    long_term_review: int
    due_for_review: int
    total: int


@dataclass(frozen=True)
class LearningStats:
    """
    Review statistics for dashboards.
    """
    total_items: int
    due_today: int
    new_items: int
    learned_items: int
    reviewed_today: int
    accuracy_rate: float
    streak_days: int
    total_reviews: int
