"""Vocabulary stores and the session log."""

from vocab_trainer.stores.base import VocabularyStore, generate_item_id
from vocab_trainer.stores.memory import InMemoryVocabularyStore

__all__ = [
    "VocabularyStore",
    "InMemoryVocabularyStore",
    "generate_item_id",
]
