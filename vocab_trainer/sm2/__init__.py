"""
SM-2 - SuperMemo-2 Spaced Repetition Scheduler

Main API for long-term review scheduling.

Quick start:
    from vocab_trainer import sm2

    # New item, due immediately
    state = sm2.create_initial()

    # Grade a review (pure, no I/O)
    state = sm2.advance(state, sm2.ReviewQuality.PERFECT)

    # Ask questions about the schedule
    sm2.is_due(state)
"""

# Core scheduler API (algorithm logic)
from vocab_trainer.sm2.scheduler import (
    advance,
    create_initial,
    reset_progress,
    graduate,
    calculate_ease_factor,
    calculate_interval,
    validate_quality,
)

# Query helpers
from vocab_trainer.sm2.queries import (
    is_due,
    is_new,
    is_learned,
    get_due_items,
    get_new_items,
    get_learned_items,
    days_until_review,
    format_interval,
    difficulty_level,
)

# Constants and parameters
from vocab_trainer.sm2.constants import (
    ReviewQuality,
    PASSING_QUALITY,
    MIN_EASE_FACTOR,
    INITIAL_EASE_FACTOR,
    FAIL_EASE_PENALTY,
    LEARNED_REPETITIONS,
)


__all__ = [
    # Core algorithm
    "advance",
    "create_initial",
    "reset_progress",
    "graduate",
    "calculate_ease_factor",
    "calculate_interval",
    "validate_quality",

    # Queries
    "is_due",
    "is_new",
    "is_learned",
    "get_due_items",
    "get_new_items",
    "get_learned_items",
    "days_until_review",
    "format_interval",
    "difficulty_level",

    # Enums
    "ReviewQuality",

    # Parameters
    "PASSING_QUALITY",
    "MIN_EASE_FACTOR",
    "INITIAL_EASE_FACTOR",
    "FAIL_EASE_PENALTY",
    "LEARNED_REPETITIONS",
]
