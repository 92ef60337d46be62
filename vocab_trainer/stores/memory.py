"""
In-memory vocabulary store.

Keeps items in insertion order and hands out copies, so callers can never
mutate stored state without going through save().
"""

from __future__ import annotations

from typing import Iterable, Optional

from vocab_trainer.errors import ItemNotFound, StaleItemError
from vocab_trainer.schemas import VocabularyItem
from vocab_trainer.stores.base import VocabularyStore


class InMemoryVocabularyStore(VocabularyStore):
    """Dict-backed store with version checking."""

    def __init__(self, items: Iterable[VocabularyItem] = ()):
        self._items: dict[str, VocabularyItem] = {}
        for item in items:
            self._items[item.id] = item.model_copy(deep=True)

    def load_all(self) -> list[VocabularyItem]:
        return [item.model_copy(deep=True) for item in self._items.values()]

    def get(self, item_id: str) -> Optional[VocabularyItem]:
        item = self._items.get(item_id)
        if item is None:
            return None
        return item.model_copy(deep=True)

    def save(self, item: VocabularyItem) -> VocabularyItem:
        current = self._items.get(item.id)
        if current is None:
            raise ItemNotFound(item.id)
        if current.version != item.version:
            raise StaleItemError(item.id, item.version)

        stored = item.model_copy(deep=True, update={"version": item.version + 1})
        self._items[item.id] = stored
        return stored.model_copy(deep=True)

    def delete(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None

    def _insert(self, item: VocabularyItem) -> VocabularyItem:
        self._items[item.id] = item.model_copy(deep=True)
        return item.model_copy(deep=True)

    def count(self) -> int:
        return len(self._items)
