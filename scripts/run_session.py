"""
Run one passive-learning playback session from the command line.

Audio is not played: utterances are logged by LoggingSpeechProvider at a
realistic pace. Progress is printed as items complete.

Usage:
    python -m scripts.run_session [--repetitions N] [--max-items N] [--fast]
"""

from __future__ import annotations

import argparse
import asyncio

from vocab_trainer import config
from vocab_trainer.errors import NoEligibleItems
from vocab_trainer.session import EventType, SessionEngine, SessionEvent
from vocab_trainer.speech import LoggingSpeechProvider
from vocab_trainer.stores.database import create_session_log
from vocab_trainer.stores.mongo_store import MongoVocabularyStore


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a passive-learning playback session")
    parser.add_argument("--repetitions", type=int, help="Repetitions per session (2-5)")
    parser.add_argument("--max-items", type=int, help="Maximum items per session (10-25)")
    parser.add_argument("--rate", type=float, help="Speech rate (0.5-2.0)")
    parser.add_argument("--fast", action="store_true", help="No pauses, instant speech")
    return parser.parse_args()


def print_event(event: SessionEvent) -> None:
    if event.type == EventType.ITEM_COMPLETED:
        schedule = event.item.schedule
        print(
            f"  [{event.repetition}] {event.item.source_text} -> {event.item.target_text}"
            f"  (exposures: {schedule.exposure_count}, stage: {schedule.learning_stage.value})"
        )
    elif event.type == EventType.SESSION_COMPLETED:
        print(f"\nSession complete: {len(event.session.item_ids_played)} items played")


async def run(args: argparse.Namespace) -> None:
    overrides = {}
    if args.repetitions is not None:
        overrides["repetitions_per_session"] = args.repetitions
    if args.max_items is not None:
        overrides["max_items_per_session"] = args.max_items
    if args.rate is not None:
        overrides["speech_rate"] = args.rate
    if args.fast:
        overrides["word_pause_ms"] = 0
        overrides["inter_word_pause_ms"] = 0
    session_config = config.load_session_config(overrides)

    speech = LoggingSpeechProvider(seconds_per_char=0.0 if args.fast else 0.06)
    engine = SessionEngine(
        store=MongoVocabularyStore(),
        speech=speech,
        session_log=create_session_log(),
    )
    engine.events.subscribe_all(print_event)

    try:
        await engine.start(session_config)
    except NoEligibleItems as exc:
        print(f"Cannot start: {exc}")
        return

    try:
        await engine.wait_closed()
    except asyncio.CancelledError:
        await engine.stop()
        raise

    summary = engine.get_progress_summary()
    print(
        f"New: {summary.new}  Learning: {summary.passive_learning}  "
        f"Mastered: {summary.mastered}  Long-term: {summary.long_term_review}"
    )


def main():
    config.configure_logging()
    args = parse_args()
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nInterrupted.")


if __name__ == "__main__":
    main()
