"""
SQLAlchemy ORM Models for the session log

Defines PlaybackSession and ReviewEvent tables.
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PlaybackSessionRecord(Base):
    """
    One finished passive-learning playback session.
    """
    __tablename__ = 'playback_sessions'

    id = Column(String(255), primary_key=True, nullable=False)

    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    duration_ms = Column(Integer, nullable=True)

    item_ids_played = Column(JSON, nullable=False, default=list)  # First-play order
    repetitions_completed = Column(Integer, nullable=False, default=0)
    completed_normally = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<PlaybackSessionRecord({self.id}, completed={self.completed_normally})>"


class ReviewEvent(Base):
    """
    Log entry for a single graded review of a vocabulary item.

    Captures the SM-2 state before/after the review.
    """
    __tablename__ = 'review_events'

    id = Column(Integer, primary_key=True, autoincrement=True)

    item_id = Column(String(255), nullable=False, index=True)

    # Timing and grade
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    quality = Column(Integer, nullable=False)  # 0-5
    response_time_ms = Column(Integer, nullable=True)

    # State before review
    interval_before = Column(Integer, nullable=True)
    ease_factor_before = Column(Float, nullable=True)
    repetition_count_before = Column(Integer, nullable=True)

    # State after review
    interval_after = Column(Integer, nullable=False)
    ease_factor_after = Column(Float, nullable=False)
    repetition_count_after = Column(Integer, nullable=False)

    learning_stage = Column(String(50), nullable=True)

    def __repr__(self):
        return f"<ReviewEvent(id={self.id}, {self.item_id}, quality={self.quality})>"
