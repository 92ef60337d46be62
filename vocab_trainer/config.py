"""
Environment configuration.

Settings come from environment variables (optionally a .env file).

Variables:
- MONGO_URI: MongoDB connection string for the vocabulary store
- VOCAB_DB_NAME / VOCAB_COLLECTION: Mongo database and collection names
- DATABASE_URL: SQLAlchemy URL for the session log (default: local SQLite)
- TEST_MODE: "true" switches to the test database
- SESSION_*: defaults for playback sessions
- LOG_LEVEL: logging level for scripts
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from vocab_trainer.schemas import SessionConfig

# Load environment
load_dotenv()

# Configuration
DEFAULT_DB_NAME = "vocab_trainer"
DEFAULT_COLLECTION_NAME = "vocabulary"
DB_DIR = Path("logs")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Environment variable -> SessionConfig field
SESSION_ENV_FIELDS = {
    "SESSION_REPETITIONS": "repetitions_per_session",
    "SESSION_WORD_PAUSE_MS": "word_pause_ms",
    "SESSION_INTER_WORD_PAUSE_MS": "inter_word_pause_ms",
    "SESSION_MAX_ITEMS": "max_items_per_session",
    "SESSION_SPEECH_RATE": "speech_rate",
    "SESSION_EXPOSURES_BEFORE_MASTERY": "exposures_before_mastery",
    "SESSION_SOURCE_VOICE": "source_voice",
    "SESSION_TARGET_VOICE": "target_voice",
}


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_mongo_uri() -> str:
    """
    Get the MongoDB connection string.

    Raises:
        ValueError: If MONGO_URI is not set
    """
    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")
    return mongo_uri


def get_db_name() -> str:
    """Mongo database name, suffixed with _test in test mode."""
    name = os.getenv("VOCAB_DB_NAME", DEFAULT_DB_NAME)
    if is_test_mode():
        return f"{name}_test"
    return name


def get_collection_name() -> str:
    return os.getenv("VOCAB_COLLECTION", DEFAULT_COLLECTION_NAME)


def get_database_url() -> str:
    """
    Get the session log database URL.

    Uses DATABASE_URL if set, otherwise a SQLite file under logs/.
    In test mode 'learning_db' in the URL is replaced with 'test_learning_db',
    and the SQLite fallback uses test_learning.db.

    Returns:
        SQLAlchemy database URL
    """
    base_url = os.getenv("DATABASE_URL")
    if base_url:
        if is_test_mode():
            return base_url.replace("learning_db", "test_learning_db")
        return base_url

    db_name = "test_learning.db" if is_test_mode() else "learning.db"
    return f"sqlite:///{DB_DIR / db_name}"


def load_session_config(overrides: Optional[dict] = None) -> SessionConfig:
    """
    Build a SessionConfig from SESSION_* environment variables.

    Args:
        overrides: Field values that win over the environment

    Returns:
        Validated SessionConfig

    Raises:
        pydantic.ValidationError: If a value is out of range
    """
    values = {}
    for env_name, field_name in SESSION_ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field_name] = raw
    if overrides:
        values.update(overrides)
    return SessionConfig(**values)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for scripts.

    Args:
        level: Level name; defaults to LOG_LEVEL or INFO
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
