"""Passive-learning playback sessions."""

from vocab_trainer.session.engine import (
    EngineState,
    Progress,
    SessionEngine,
)
from vocab_trainer.session.events import EventBus, EventType, SessionEvent
from vocab_trainer.session.progression import apply_exposure
from vocab_trainer.session.selection import select_working_set

__all__ = [
    "EngineState",
    "Progress",
    "SessionEngine",
    "EventBus",
    "EventType",
    "SessionEvent",
    "apply_exposure",
    "select_working_set",
]
