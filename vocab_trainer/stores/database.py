"""
Database - Session Log I/O Operations

Persists finished playback sessions and graded review events.
Uses SQLAlchemy ORM (SQLite by default, any SQLAlchemy URL via DATABASE_URL).

This module handles ONLY database I/O.
Algorithm logic lives in the sm2 and session packages.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from vocab_trainer import config
from vocab_trainer.errors import StoreError
from vocab_trainer.schemas import PlaybackSession
from vocab_trainer.stores.models import Base, PlaybackSessionRecord, ReviewEvent

logger = logging.getLogger(__name__)

# Retention
MAX_STORED_SESSIONS = 50
MAX_STORED_EVENTS = 1000

REVIEW_EVENT_FIELDS = (
    "item_id",
    "timestamp",
    "quality",
    "response_time_ms",
    "interval_before",
    "ease_factor_before",
    "repetition_count_before",
    "interval_after",
    "ease_factor_after",
    "repetition_count_after",
    "learning_stage",
)


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create a SQLAlchemy engine for the session log.

    Uses connection pooling for server databases.

    Args:
        database_url: SQLAlchemy URL (defaults to config.get_database_url())

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = database_url or config.get_database_url()
    if db_url.startswith("sqlite"):
        if db_url.startswith("sqlite:///") and db_url != "sqlite:///:memory:":
            config.DB_DIR.mkdir(parents=True, exist_ok=True)
        return create_engine(db_url, echo=False)
    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def _session_to_record(session: PlaybackSession) -> PlaybackSessionRecord:
    return PlaybackSessionRecord(
        id=session.id,
        started_at=session.started_at,
        ended_at=session.ended_at,
        duration_ms=session.duration_ms,
        item_ids_played=list(session.item_ids_played),
        repetitions_completed=session.repetitions_completed,
        completed_normally=session.completed_normally,
    )


def _record_to_session(record: PlaybackSessionRecord) -> PlaybackSession:
    return PlaybackSession(
        id=record.id,
        started_at=record.started_at,
        ended_at=record.ended_at,
        item_ids_played=list(record.item_ids_played or []),
        repetitions_completed=record.repetitions_completed,
        completed_normally=record.completed_normally,
    )


def _event_to_dict(event: ReviewEvent) -> dict:
    data = {field: getattr(event, field) for field in REVIEW_EVENT_FIELDS}
    data["id"] = event.id
    return data


class SessionLog:
    """
    Session and review history backed by a SQLAlchemy engine.

    The engine is injected so tests and parallel callers get isolated logs.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        max_sessions: int = MAX_STORED_SESSIONS,
        max_events: int = MAX_STORED_EVENTS
    ):
        self.engine = engine if engine is not None else get_engine()
        self.max_sessions = max_sessions
        self.max_events = max_events
        self._sessionmaker = sessionmaker(bind=self.engine, expire_on_commit=False)

    def get_session(self) -> Session:
        return self._sessionmaker()

    # ---- Schema ----

    def init_db(self) -> None:
        """
        Create tables if they don't exist.

        Safe to call multiple times.
        """
        Base.metadata.create_all(self.engine)

    def reset_db(self) -> None:
        """
        DANGEROUS: Delete all data and recreate tables.

        All session and review history will be lost!
        """
        Base.metadata.drop_all(self.engine)
        logger.warning("Session log tables dropped")
        self.init_db()

    # ---- Playback Sessions ----

    def save_session(self, session: PlaybackSession) -> None:
        """
        Persist a finished playback session and prune old ones.

        Args:
            session: Finalized session record

        Raises:
            StoreError: If the write fails
        """
        db = self.get_session()
        try:
            db.merge(_session_to_record(session))
            db.flush()

            stale_ids = [
                row.id for row in db.query(PlaybackSessionRecord.id)
                .order_by(PlaybackSessionRecord.started_at.desc())
                .offset(self.max_sessions)
                .all()
            ]
            if stale_ids:
                db.query(PlaybackSessionRecord).filter(
                    PlaybackSessionRecord.id.in_(stale_ids)
                ).delete(synchronize_session=False)

            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreError(f"Failed to save playback session {session.id}: {exc}") from exc
        finally:
            db.close()

    def recent_sessions(self, limit: int = 10) -> list[PlaybackSession]:
        """
        Get recent playback sessions.

        Args:
            limit: Maximum number of sessions to return

        Returns:
            Sessions, newest first
        """
        db = self.get_session()
        try:
            records = db.query(PlaybackSessionRecord).order_by(
                PlaybackSessionRecord.started_at.desc()
            ).limit(limit).all()
            return [_record_to_session(record) for record in records]
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read playback sessions: {exc}") from exc
        finally:
            db.close()

    # ---- Review Events ----

    def log_review_event(self, event: dict) -> None:
        self.batch_log_review_events([event])

    def batch_log_review_events(self, events: list[dict]) -> None:
        """
        Log multiple review events in a single transaction.

        Args:
            events: Event dicts with keys from REVIEW_EVENT_FIELDS
        """
        if not events:
            return

        db = self.get_session()
        try:
            for event in events:
                db.add(ReviewEvent(**{field: event.get(field) for field in REVIEW_EVENT_FIELDS}))
            db.flush()

            stale_ids = [
                row.id for row in db.query(ReviewEvent.id)
                .order_by(ReviewEvent.timestamp.desc(), ReviewEvent.id.desc())
                .offset(self.max_events)
                .all()
            ]
            if stale_ids:
                db.query(ReviewEvent).filter(
                    ReviewEvent.id.in_(stale_ids)
                ).delete(synchronize_session=False)

            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreError(f"Failed to log review events: {exc}") from exc
        finally:
            db.close()

    def get_review_events(
        self,
        limit: Optional[int] = None,
        since: Optional[datetime] = None
    ) -> list[dict]:
        """
        Get logged review events.

        Args:
            limit: Maximum number of events to return
            since: Only events at or after this time

        Returns:
            List of event dicts (newest first)
        """
        db = self.get_session()
        try:
            query = db.query(ReviewEvent)
            if since is not None:
                query = query.filter(ReviewEvent.timestamp >= since)
            query = query.order_by(ReviewEvent.timestamp.desc(), ReviewEvent.id.desc())
            if limit is not None:
                query = query.limit(limit)
            return [_event_to_dict(event) for event in query.all()]
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read review events: {exc}") from exc
        finally:
            db.close()


def create_session_log(database_url: Optional[str] = None) -> SessionLog:
    """
    Build a SessionLog and make sure its tables exist.
    """
    log = SessionLog(get_engine(database_url))
    log.init_db()
    return log
