from datetime import timedelta

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from vocab_trainer.schemas import PlaybackSession
from vocab_trainer.stores.database import SessionLog

from conftest import T0


def make_session(n, completed=True):
    session = PlaybackSession(id=f"playback-{n}", started_at=T0 + timedelta(minutes=n))
    session.record_item("item-0")
    session.record_item("item-1")
    session.repetitions_completed = 3
    session.finalize(session.started_at + timedelta(seconds=90), completed_normally=completed)
    return session


def make_event(n, quality=4):
    return {
        "item_id": f"item-{n % 3}",
        "timestamp": T0 + timedelta(minutes=n),
        "quality": quality,
        "response_time_ms": 1500,
        "interval_before": 1,
        "ease_factor_before": 2.5,
        "repetition_count_before": 1,
        "interval_after": 6,
        "ease_factor_after": 2.5,
        "repetition_count_after": 2,
        "learning_stage": "long_term_review",
    }


def small_log(**limits):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    log = SessionLog(engine, **limits)
    log.init_db()
    return log


def test_save_and_read_session(session_log):
    session = make_session(1, completed=False)

    session_log.save_session(session)

    [stored] = session_log.recent_sessions()
    assert stored.id == "playback-1"
    assert stored.started_at == session.started_at
    assert stored.ended_at == session.ended_at
    assert stored.item_ids_played == ["item-0", "item-1"]
    assert stored.repetitions_completed == 3
    assert not stored.completed_normally
    assert stored.duration_ms == 90000


def test_saving_twice_updates_record(session_log):
    session = make_session(1, completed=False)
    session_log.save_session(session)
    session.completed_normally = True
    session_log.save_session(session)

    [stored] = session_log.recent_sessions()
    assert stored.completed_normally


def test_recent_sessions_newest_first(session_log):
    for n in range(5):
        session_log.save_session(make_session(n))

    recent = session_log.recent_sessions(limit=3)

    assert [session.id for session in recent] == ["playback-4", "playback-3", "playback-2"]


def test_old_sessions_are_pruned():
    log = small_log(max_sessions=3)
    for n in range(6):
        log.save_session(make_session(n))

    assert [session.id for session in log.recent_sessions(limit=10)] == [
        "playback-5", "playback-4", "playback-3",
    ]


def test_review_events(session_log):
    session_log.batch_log_review_events([make_event(n) for n in range(3)])
    session_log.log_review_event(make_event(3, quality=1))

    events = session_log.get_review_events()

    assert [event["quality"] for event in events] == [1, 4, 4, 4]
    assert events[0]["item_id"] == "item-0"
    assert events[0]["learning_stage"] == "long_term_review"
    assert session_log.get_review_events(limit=2)[1]["id"] == events[1]["id"]
    assert len(session_log.get_review_events(since=T0 + timedelta(minutes=2))) == 2


def test_old_review_events_are_pruned():
    log = small_log(max_events=5)
    log.batch_log_review_events([make_event(n) for n in range(8)])

    events = log.get_review_events()

    assert len(events) == 5


def test_empty_batch_is_ignored(session_log):
    session_log.batch_log_review_events([])
    assert session_log.get_review_events() == []


def test_reset_db(session_log):
    session_log.save_session(make_session(1))
    session_log.log_review_event(make_event(1))

    session_log.reset_db()

    assert session_log.recent_sessions() == []
    assert session_log.get_review_events() == []
