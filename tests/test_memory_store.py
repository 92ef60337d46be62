import pytest

from vocab_trainer import sm2
from vocab_trainer.errors import ItemNotFound, StaleItemError
from vocab_trainer.schemas import LearningStage
from vocab_trainer.stores import InMemoryVocabularyStore

from conftest import T0


def test_add_creates_new_item_with_initial_schedule():
    store = InMemoryVocabularyStore()

    item = store.add("good morning", "goedemorgen", tags=["greeting"], now=T0)

    assert item.id
    assert item.tags == {"greeting"}
    assert item.version == 0
    assert item.schedule.learning_stage == LearningStage.NEW
    assert item.schedule.next_review_at == T0
    assert store.count() == 1
    assert store.get(item.id) == item


def test_load_all_keeps_insertion_order(store):
    assert [item.id for item in store.load_all()] == ["item-0", "item-1", "item-2"]


def test_save_increments_version(store):
    item = store.get("item-0")
    updated = item.with_schedule(sm2.advance(item.schedule, 5, T0))

    saved = store.save(updated)

    assert saved.version == 1
    assert store.get("item-0").version == 1
    assert store.get("item-0").schedule.repetition_count == 1


def test_stale_save_is_rejected(store):
    first = store.get("item-0")
    second = store.get("item-0")
    store.save(first.with_schedule(sm2.advance(first.schedule, 5, T0)))

    with pytest.raises(StaleItemError) as exc_info:
        store.save(second.with_schedule(sm2.advance(second.schedule, 1, T0)))

    assert exc_info.value.item_id == "item-0"
    assert exc_info.value.expected_version == 0
    assert store.get("item-0").schedule.repetition_count == 1


def test_save_unknown_item(store, make_item):
    with pytest.raises(ItemNotFound):
        store.save(make_item(99))


def test_delete(store):
    assert store.delete("item-1")
    assert not store.delete("item-1")
    assert [item.id for item in store.load_all()] == ["item-0", "item-2"]


def test_get_unknown_item(store):
    assert store.get("missing") is None


def test_returned_items_are_copies(store):
    item = store.get("item-0")
    item.tags.add("mutated")

    assert store.get("item-0").tags == {"test"}
    assert "mutated" not in store.load_all()[0].tags
