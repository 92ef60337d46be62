"""
SM-2 Constants and Parameters

All configurable parameters for the SM-2 scheduler in one place.
"""

from datetime import timedelta
from enum import IntEnum

from vocab_trainer.schemas import INITIAL_EASE_FACTOR, MIN_EASE_FACTOR


# ---- Review Quality ----

class ReviewQuality(IntEnum):
    """Learner's self-assessed recall quality (SM-2 0-5 scale)."""
    BLACKOUT = 0          # Complete failure to recall
    INCORRECT = 1         # Wrong, but the answer felt familiar
    INCORRECT_EASY = 2    # Wrong, but the answer seemed easy once shown
    DIFFICULT = 3         # Correct with serious difficulty
    HESITANT = 4          # Correct after hesitation
    PERFECT = 5           # Correct and immediate


# ---- Algorithm Parameters ----

PASSING_QUALITY = 3  # Qualities below this are failures
MAX_QUALITY = 5

FIRST_INTERVAL_DAYS = 1    # Interval after the first successful review
SECOND_INTERVAL_DAYS = 6   # Interval after the second successful review

# Ease factor change on a failed review (floored at MIN_EASE_FACTOR)
FAIL_EASE_PENALTY = 0.2

LEARNED_REPETITIONS = 3  # Repetitions before an item counts as "learned"

ONE_DAY = timedelta(days=1)

__all__ = [
    "ReviewQuality",
    "PASSING_QUALITY",
    "MAX_QUALITY",
    "MIN_EASE_FACTOR",
    "INITIAL_EASE_FACTOR",
    "FIRST_INTERVAL_DAYS",
    "SECOND_INTERVAL_DAYS",
    "FAIL_EASE_PENALTY",
    "LEARNED_REPETITIONS",
    "ONE_DAY",
]
