"""
Bulk import of vocabulary pairs from CSV.

Expected columns: source_text, target_text and an optional comma-separated
tags column. Rows whose source text is already in the store are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from vocab_trainer.stores.base import VocabularyStore

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("source_text", "target_text")


@dataclass
class ImportResult:
    added: list[str] = field(default_factory=list)  # New item ids
    skipped: list[str] = field(default_factory=list)  # Source texts already present
    invalid_rows: list[int] = field(default_factory=list)  # Row numbers with empty text


def parse_tags(value) -> list[str]:
    """Parse comma-separated tags from a CSV cell."""
    if pd.isna(value) or not str(value).strip():
        return []
    tags = [tag.strip() for tag in str(value).split(",")]
    return [tag for tag in tags if tag]


def read_vocabulary_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a vocabulary CSV.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a required column is missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV not found: {path}")

    df = pd.read_csv(path, dtype=str)
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(missing)}")
    return df


def import_frame(
    store: VocabularyStore,
    df: pd.DataFrame,
    dry_run: bool = False,
    now: Optional[datetime] = None
) -> ImportResult:
    """
    Add every new row of the dataframe to the store.

    Args:
        store: Target vocabulary store
        df: Rows with source_text / target_text / optional tags
        dry_run: Report what would be added without writing
        now: Creation timestamp for new items

    Returns:
        ImportResult with added ids, skipped source texts and invalid rows
    """
    result = ImportResult()
    existing = {item.source_text.strip().lower() for item in store.load_all()}

    for row_number, row in enumerate(df.to_dict("records"), start=1):
        source = row.get("source_text")
        target = row.get("target_text")
        if pd.isna(source) or pd.isna(target) or not str(source).strip() or not str(target).strip():
            result.invalid_rows.append(row_number)
            continue

        source = str(source).strip()
        key = source.lower()
        if key in existing:
            result.skipped.append(source)
            continue
        existing.add(key)

        if dry_run:
            logger.info("[dry run] would add %s -> %s", source, target)
            continue

        item = store.add(source, str(target).strip(), tags=parse_tags(row.get("tags")), now=now)
        result.added.append(item.id)

    logger.info(
        "Import finished: %d added, %d skipped, %d invalid",
        len(result.added), len(result.skipped), len(result.invalid_rows)
    )
    return result
