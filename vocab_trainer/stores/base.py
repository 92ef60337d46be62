"""
Abstract vocabulary store.

Defines the interface the scheduler services and the session engine use to
read and write vocabulary items.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from vocab_trainer import sm2
from vocab_trainer.schemas import VocabularyItem


class VocabularyStore(ABC):
    """
    Abstract base class for vocabulary stores.

    Subclasses should implement:
    - load_all()
    - get()
    - save()
    - delete()
    - _insert()

    save() must be a compare-and-swap on `item.version`: it succeeds only if
    the stored copy still has the version the caller read, and it returns the
    stored copy with the version incremented.
    """

    @abstractmethod
    def load_all(self) -> list[VocabularyItem]:
        """Return every item in store order."""
        pass

    @abstractmethod
    def get(self, item_id: str) -> Optional[VocabularyItem]:
        """Return one item, or None if it does not exist."""
        pass

    @abstractmethod
    def save(self, item: VocabularyItem) -> VocabularyItem:
        """
        Persist an existing item.

        Raises:
            ItemNotFound: If the item does not exist
            StaleItemError: If the stored version differs from item.version
            StoreError: On any other storage failure
        """
        pass

    @abstractmethod
    def delete(self, item_id: str) -> bool:
        """Remove an item. Returns False if it did not exist."""
        pass

    @abstractmethod
    def _insert(self, item: VocabularyItem) -> VocabularyItem:
        """Persist a brand new item."""
        pass

    def add(
        self,
        source_text: str,
        target_text: str,
        tags: Iterable[str] = (),
        now: Optional[datetime] = None
    ) -> VocabularyItem:
        """
        Create a new item with an initial schedule.

        Args:
            source_text: Text spoken first
            target_text: Text spoken second
            tags: Optional labels
            now: Creation timestamp (defaults to now)

        Returns:
            The stored item
        """
        item = VocabularyItem(
            id=generate_item_id(),
            source_text=source_text,
            target_text=target_text,
            tags=set(tags),
            schedule=sm2.create_initial(now),
        )
        return self._insert(item)

    def count(self) -> int:
        return len(self.load_all())


def generate_item_id() -> str:
    """
    Generate a unique item ID (UUID).

    Returns:
        UUID string
    """
    return str(uuid.uuid4())
