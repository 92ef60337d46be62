"""
Working-set selection for playback sessions.

Playback is only for new learning: items that reached MASTERED or
LONG_TERM_REVIEW are left to the review scheduler.
"""

from __future__ import annotations

import logging
from typing import Sequence, TypeVar

from vocab_trainer.schemas import PLAYBACK_STAGES, VocabularyItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


def take(items: Sequence[T], limit: int) -> list[T]:
    """First `limit` items in order."""
    if limit <= 0:
        return []
    return list(items[:limit])


def select_working_set(
    items: Sequence[VocabularyItem],
    max_items: int
) -> list[VocabularyItem]:
    """
    Pick the items a playback session will cycle through.

    Rules:
    1. Items in NEW or PASSIVE_LEARNING, in store order
    2. If there are none, every item is eligible (stores without stage data)
    3. Truncate to max_items

    Args:
        items: Full vocabulary collection
        max_items: Maximum working-set size

    Returns:
        Working set (may be empty if the collection is empty)
    """
    learning = [item for item in items if item.schedule.learning_stage in PLAYBACK_STAGES]

    if not learning and items:
        logger.info("No items in a playback stage, treating all %d items as eligible", len(items))
        return take(items, max_items)

    return take(learning, max_items)
