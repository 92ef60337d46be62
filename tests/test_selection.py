from vocab_trainer.schemas import LearningStage
from vocab_trainer.session.selection import select_working_set, take


def test_take():
    assert take([1, 2, 3], 2) == [1, 2]
    assert take([1, 2, 3], 10) == [1, 2, 3]
    assert take([1, 2, 3], 0) == []


def test_excludes_mastered_and_long_term_items(make_item):
    items = [
        make_item(0, LearningStage.NEW),
        make_item(1, LearningStage.MASTERED),
        make_item(2, LearningStage.PASSIVE_LEARNING, exposure_count=2),
        make_item(3, LearningStage.LONG_TERM_REVIEW),
    ]

    working_set = select_working_set(items, 10)

    assert [item.id for item in working_set] == ["item-0", "item-2"]


def test_truncates_to_max_items_in_store_order(make_item):
    items = [make_item(i) for i in range(30)]

    working_set = select_working_set(items, 15)

    assert len(working_set) == 15
    assert [item.id for item in working_set] == [f"item-{i}" for i in range(15)]


def test_falls_back_to_whole_collection(make_item):
    items = [
        make_item(0, LearningStage.MASTERED),
        make_item(1, LearningStage.LONG_TERM_REVIEW),
    ]

    working_set = select_working_set(items, 10)

    assert [item.id for item in working_set] == ["item-0", "item-1"]


def test_empty_collection():
    assert select_working_set([], 10) == []
