"""
MongoDB repository for vocabulary items.

One document per item, keyed by `item_id`. Saves are conditional on the
document's `version`, so a playback session and a manual review writing the
same item cannot overwrite each other's changes.
"""

from __future__ import annotations

import logging
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from vocab_trainer import config, sm2
from vocab_trainer.errors import ItemNotFound, StaleItemError, StoreError
from vocab_trainer.schemas import VocabularyItem
from vocab_trainer.stores.base import VocabularyStore

logger = logging.getLogger(__name__)

# Global connection pool (reused across stores)
_client: Optional[MongoClient] = None


# ---- Connection Management ----

def get_collection() -> Collection:
    """
    Get a connection to the MongoDB vocabulary collection.

    Uses a persistent connection pool that's reused across calls
    to avoid paying the connection cost on every query.

    Returns:
        MongoDB collection object
    """
    global _client

    if _client is None:
        _client = MongoClient(
            config.get_mongo_uri(),
            maxPoolSize=10,  # Connection pool size
            minPoolSize=1,   # Keep at least 1 connection alive
            maxIdleTimeMS=60000,  # Keep connections alive for 60 seconds
            tz_aware=True,
        )
    db = _client[config.get_db_name()]
    return db[config.get_collection_name()]


def ensure_indexes(collection: Collection) -> None:
    """Create the unique item_id index (safe to call repeatedly)."""
    collection.create_index("item_id", unique=True)


# ---- Document Mapping ----

def to_document(item: VocabularyItem) -> dict:
    doc = item.model_dump(mode="python", exclude={"id"})
    doc["item_id"] = item.id
    doc["tags"] = sorted(item.tags)
    doc["schedule"]["learning_stage"] = item.schedule.learning_stage.value
    return doc


def from_document(doc: dict) -> VocabularyItem:
    """
    Build an item from a stored document.

    Documents written before stage tracking existed load as NEW with zero
    exposures; documents with no schedule at all get a fresh one.
    """
    data = {key: value for key, value in doc.items() if key not in ("_id", "item_id")}
    data["id"] = doc["item_id"]
    if not data.get("schedule"):
        data["schedule"] = sm2.create_initial().model_dump()
    return VocabularyItem.model_validate(data)


def version_filter(item_id: str, version: int) -> dict:
    """
    Query matching the stored document only if it still has `version`.

    Documents written before versioning have no version field and load as
    version 0, so version 0 also matches a missing field.
    """
    if version == 0:
        return {
            "item_id": item_id,
            "$or": [{"version": 0}, {"version": {"$exists": False}}],
        }
    return {"item_id": item_id, "version": version}


# ---- Store ----

class MongoVocabularyStore(VocabularyStore):
    """Vocabulary store backed by a MongoDB collection."""

    def __init__(self, collection: Optional[Collection] = None):
        self._collection = collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            self._collection = get_collection()
        return self._collection

    def load_all(self) -> list[VocabularyItem]:
        try:
            docs = list(self.collection.find({}).sort("_id", ASCENDING))
        except PyMongoError as exc:
            raise StoreError(f"Failed to load vocabulary: {exc}") from exc
        return [from_document(doc) for doc in docs]

    def get(self, item_id: str) -> Optional[VocabularyItem]:
        try:
            doc = self.collection.find_one({"item_id": item_id})
        except PyMongoError as exc:
            raise StoreError(f"Failed to load vocabulary item {item_id}: {exc}") from exc
        if doc is None:
            return None
        return from_document(doc)

    def save(self, item: VocabularyItem) -> VocabularyItem:
        stored = item.model_copy(update={"version": item.version + 1})
        try:
            result = self.collection.replace_one(
                version_filter(item.id, item.version),
                to_document(stored),
            )
            if result.matched_count == 0:
                if self.collection.count_documents({"item_id": item.id}, limit=1) == 0:
                    raise ItemNotFound(item.id)
                raise StaleItemError(item.id, item.version)
        except PyMongoError as exc:
            raise StoreError(f"Failed to save vocabulary item {item.id}: {exc}") from exc
        return stored

    def delete(self, item_id: str) -> bool:
        try:
            result = self.collection.delete_one({"item_id": item_id})
        except PyMongoError as exc:
            raise StoreError(f"Failed to delete vocabulary item {item_id}: {exc}") from exc
        return result.deleted_count > 0

    def _insert(self, item: VocabularyItem) -> VocabularyItem:
        try:
            self.collection.insert_one(to_document(item))
        except PyMongoError as exc:
            raise StoreError(f"Failed to insert vocabulary item {item.id}: {exc}") from exc
        logger.info("Added vocabulary item %s (%s)", item.id, item.source_text)
        return item

    def count(self) -> int:
        try:
            return self.collection.count_documents({})
        except PyMongoError as exc:
            raise StoreError(f"Failed to count vocabulary: {exc}") from exc

    def get_all_tags(self) -> list[str]:
        """
        Get all unique tags in the collection.

        Returns:
            Sorted list of unique tags
        """
        pipeline = [
            {"$unwind": "$tags"},
            {"$group": {"_id": "$tags"}}
        ]
        try:
            tags = {doc["_id"] for doc in self.collection.aggregate(pipeline)}
        except PyMongoError as exc:
            raise StoreError(f"Failed to read tags: {exc}") from exc
        return sorted(tags)
