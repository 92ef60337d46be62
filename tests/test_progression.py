from datetime import timedelta

import pytest

from vocab_trainer import sm2
from vocab_trainer.schemas import LearningStage
from vocab_trainer.session.progression import apply_exposure

from conftest import T0


def test_new_item_moves_to_passive_learning():
    state = apply_exposure(sm2.create_initial(T0), 5, T0)

    assert state.learning_stage == LearningStage.PASSIVE_LEARNING
    assert state.exposure_count == 1
    assert state.last_session_at == T0


def test_passive_learning_stays_below_threshold():
    state = sm2.create_initial(T0).evolve(
        learning_stage=LearningStage.PASSIVE_LEARNING,
        exposure_count=2,
    )
    state = apply_exposure(state, 5, T0)

    assert state.learning_stage == LearningStage.PASSIVE_LEARNING
    assert state.exposure_count == 3
    assert state.mastered_at is None


def test_threshold_hands_item_to_review():
    later = T0 + timedelta(hours=5)
    state = sm2.create_initial(T0).evolve(
        learning_stage=LearningStage.PASSIVE_LEARNING,
        exposure_count=4,
    )

    state = apply_exposure(state, 5, later)

    assert state.learning_stage == LearningStage.MASTERED
    assert state.exposure_count == 5
    assert state.mastered_at == later
    assert state.interval_days == 1
    assert state.repetition_count == 0
    assert state.next_review_at == later + timedelta(days=1)


def test_threshold_of_one_masters_new_item_directly():
    state = apply_exposure(sm2.create_initial(T0), 1, T0)
    assert state.learning_stage == LearningStage.MASTERED


@pytest.mark.parametrize("stage", [LearningStage.MASTERED, LearningStage.LONG_TERM_REVIEW])
def test_items_past_passive_learning_keep_stage_and_schedule(stage):
    state = sm2.advance(sm2.create_initial(T0), 5, T0).evolve(
        learning_stage=stage,
        exposure_count=9,
    )

    updated = apply_exposure(state, 5, T0 + timedelta(hours=1))

    assert updated.learning_stage == stage
    assert updated.exposure_count == 10
    assert updated.next_review_at == state.next_review_at
    assert updated.repetition_count == state.repetition_count


def test_stage_never_regresses():
    state = sm2.create_initial(T0)
    ranks = []
    for n in range(8):
        state = apply_exposure(state, 5, T0 + timedelta(minutes=n))
        ranks.append(state.learning_stage.rank)
    assert ranks == sorted(ranks)
    assert state.learning_stage == LearningStage.MASTERED
