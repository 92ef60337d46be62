"""
Exception hierarchy for the vocabulary trainer.

Invalid engine transitions (pause while idle, resume while active, ...) are
not errors: the engine treats them as no-ops.
"""

from __future__ import annotations


class VocabTrainerError(Exception):
    """Base class for all trainer errors."""


# ---- Session Engine ----

class SessionAlreadyActive(VocabTrainerError):
    """start() was called while a session is active or paused."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is already in progress")
        self.session_id = session_id


class NoEligibleItems(VocabTrainerError):
    """The working set is empty even after the whole-collection fallback."""

    def __init__(self):
        super().__init__("No vocabulary items available for a playback session")


# ---- Storage ----

class StoreError(VocabTrainerError):
    """A vocabulary store or session log operation failed."""


class StaleItemError(StoreError):
    """The item was modified by someone else since it was read."""

    def __init__(self, item_id: str, expected_version: int):
        super().__init__(
            f"Vocabulary item {item_id} changed since version {expected_version}"
        )
        self.item_id = item_id
        self.expected_version = expected_version


class ItemNotFound(StoreError):
    """No vocabulary item exists with the given id."""

    def __init__(self, item_id: str):
        super().__init__(f"Vocabulary item with id {item_id} not found")
        self.item_id = item_id


# ---- Speech ----

class SpeechError(VocabTrainerError):
    """The speech provider could not speak an utterance."""
