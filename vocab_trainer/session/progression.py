"""
Stage progression applied after each full playback of an item.
"""

from __future__ import annotations

from datetime import datetime

from vocab_trainer import sm2
from vocab_trainer.schemas import PLAYBACK_STAGES, LearningStage, ScheduleState


def apply_exposure(
    state: ScheduleState,
    exposures_before_mastery: int,
    now: datetime
) -> ScheduleState:
    """
    Count one exposure and move the item along its learning stages.

    Rules (once per completed playback):
    - exposure count reaches the mastery threshold -> MASTERED, handed to
      SM-2 review (interval 1 day, repetition count 0, due tomorrow)
    - NEW -> PASSIVE_LEARNING
    - otherwise the stage is unchanged

    Items already past passive learning (only played through the
    whole-collection fallback) keep their stage and schedule.

    Args:
        state: Schedule state read just before the update
        exposures_before_mastery: Mastery threshold
        now: Update timestamp

    Returns:
        New ScheduleState
    """
    exposure_count = state.exposure_count + 1
    updated = state.evolve(
        exposure_count=exposure_count,
        last_session_at=now,
        updated_at=now,
    )

    if state.learning_stage not in PLAYBACK_STAGES:
        return updated

    if exposure_count >= exposures_before_mastery:
        return sm2.graduate(updated, now)

    if state.learning_stage == LearningStage.NEW:
        return updated.evolve(learning_stage=LearningStage.PASSIVE_LEARNING)

    return updated
