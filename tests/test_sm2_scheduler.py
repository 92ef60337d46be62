"""
Tests for the SM-2 scheduler (pure functions).
"""

import itertools
import math
from datetime import timedelta

import pytest

from vocab_trainer import sm2
from vocab_trainer.schemas import LearningStage
from vocab_trainer.sm2 import ReviewQuality

from conftest import T0


def test_create_initial():
    state = sm2.create_initial(T0)

    assert state.interval_days == 0
    assert state.repetition_count == 0
    assert state.ease_factor == 2.5
    assert state.next_review_at == T0
    assert state.last_reviewed_at is None
    assert state.learning_stage == LearningStage.NEW
    assert state.exposure_count == 0
    assert sm2.is_due(state, T0)


def test_first_perfect_review():
    state = sm2.advance(sm2.create_initial(T0), 5, T0)

    assert state.repetition_count == 1
    assert state.interval_days == 1
    assert state.ease_factor == pytest.approx(2.6)
    assert state.next_review_at == T0 + timedelta(days=1)
    assert state.last_reviewed_at == T0


def test_second_review_uses_six_days():
    t1 = T0 + timedelta(days=1)
    state = sm2.advance(sm2.create_initial(T0), 5, T0)
    state = sm2.advance(state, 4, t1)

    assert state.repetition_count == 2
    assert state.interval_days == 6
    assert state.ease_factor == pytest.approx(2.6)
    assert state.next_review_at == t1 + timedelta(days=6)


def test_third_review_multiplies_by_previous_ease():
    state = sm2.create_initial(T0)
    for quality in (5, 4, 5):
        state = sm2.advance(state, quality, T0)

    # 6 * 2.6 = 15.6 -> 16
    assert state.repetition_count == 3
    assert state.interval_days == 16
    assert state.ease_factor == pytest.approx(2.7)


def test_quality_three_lowers_ease():
    state = sm2.advance(sm2.create_initial(T0), 3, T0)
    assert state.ease_factor == pytest.approx(2.36)
    assert state.repetition_count == 1


@pytest.mark.parametrize("quality", [0, 1, 2])
def test_failure_resets_repetitions(quality):
    state = sm2.create_initial(T0)
    for _ in range(4):
        state = sm2.advance(state, 5, T0)
    assert state.interval_days > 1

    failed = sm2.advance(state, quality, T0)

    assert failed.repetition_count == 0
    assert failed.interval_days == 1
    assert failed.next_review_at == T0 + timedelta(days=1)
    assert failed.ease_factor == pytest.approx(state.ease_factor - 0.2)


def test_failure_never_drops_ease_below_floor():
    state = sm2.create_initial(T0)
    for _ in range(10):
        state = sm2.advance(state, ReviewQuality.BLACKOUT, T0)
    assert state.ease_factor == pytest.approx(1.3)
    assert state.ease_factor >= 1.3


def test_quality_three_at_floor_stays_at_floor():
    state = sm2.create_initial(T0).evolve(ease_factor=1.3, repetition_count=2, interval_days=6)
    state = sm2.advance(state, 3, T0)
    assert state.ease_factor == 1.3
    assert state.interval_days == round(6 * 1.3)


def test_successful_trajectories_follow_interval_sequence():
    for qualities in itertools.product((3, 4, 5), repeat=5):
        state = sm2.create_initial(T0)
        for n, quality in enumerate(qualities, start=1):
            previous = state
            state = sm2.advance(state, quality, T0)

            assert state.repetition_count == n
            assert state.ease_factor >= 1.3
            if n == 1:
                assert state.interval_days == 1
            elif n == 2:
                assert state.interval_days == 6
            else:
                expected = math.floor(previous.interval_days * previous.ease_factor + 0.5)
                assert state.interval_days == expected
            assert state.next_review_at == T0 + timedelta(days=state.interval_days)


def test_advance_is_pure():
    state = sm2.create_initial(T0)
    snapshot = state.model_dump()

    first = sm2.advance(state, 4, T0)
    second = sm2.advance(state, 4, T0)

    assert first == second
    assert state.model_dump() == snapshot


def test_advance_keeps_passive_learning_fields():
    state = sm2.create_initial(T0).evolve(
        learning_stage=LearningStage.PASSIVE_LEARNING,
        exposure_count=3,
    )
    updated = sm2.advance(state, 5, T0)
    assert updated.learning_stage == LearningStage.PASSIVE_LEARNING
    assert updated.exposure_count == 3


@pytest.mark.parametrize("quality", [-1, 6, 2.5, "5", True, None])
def test_invalid_quality_rejected(quality):
    with pytest.raises(ValueError):
        sm2.advance(sm2.create_initial(T0), quality, T0)


def test_review_quality_enum_accepted():
    state = sm2.advance(sm2.create_initial(T0), ReviewQuality.HESITANT, T0)
    assert state.repetition_count == 1


def test_calculate_ease_factor():
    assert sm2.calculate_ease_factor(2.5, 5) == pytest.approx(2.6)
    assert sm2.calculate_ease_factor(2.5, 4) == pytest.approx(2.5)
    assert sm2.calculate_ease_factor(2.5, 3) == pytest.approx(2.36)
    assert sm2.calculate_ease_factor(1.35, 3) == 1.3


def test_calculate_interval_rounds_half_up():
    assert sm2.calculate_interval(1, 0, 2.5) == 1
    assert sm2.calculate_interval(2, 1, 2.5) == 6
    assert sm2.calculate_interval(3, 5, 2.5) == 13  # 12.5
    assert sm2.calculate_interval(3, 6, 2.5) == 15


def test_graduate():
    state = sm2.create_initial(T0).evolve(
        learning_stage=LearningStage.PASSIVE_LEARNING,
        exposure_count=5,
        repetition_count=2,
        interval_days=6,
    )
    graduated = sm2.graduate(state, T0)

    assert graduated.learning_stage == LearningStage.MASTERED
    assert graduated.mastered_at == T0
    assert graduated.interval_days == 1
    assert graduated.repetition_count == 0
    assert graduated.next_review_at == T0 + timedelta(days=1)
    assert graduated.exposure_count == 5


def test_reset_progress():
    state = sm2.create_initial(T0)
    state = sm2.advance(state, 5, T0)
    state = sm2.graduate(state.evolve(exposure_count=7), T0)
    later = T0 + timedelta(days=3)

    reset = sm2.reset_progress(state, later)

    assert reset.learning_stage == LearningStage.NEW
    assert reset.exposure_count == 0
    assert reset.repetition_count == 0
    assert reset.interval_days == 0
    assert reset.ease_factor == 2.5
    assert reset.last_reviewed_at is None
    assert reset.mastered_at is None
    assert reset.next_review_at == later
    assert reset.created_at == state.created_at
