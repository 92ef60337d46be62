"""
Import vocabulary pairs from CSV into MongoDB.

This script:
1. Reads the CSV (source_text, target_text, optional tags)
2. Skips pairs whose source text is already stored
3. Adds the rest as NEW items with a fresh schedule

Usage:
    python -m scripts.data.import_vocabulary data/vocabulary.csv [--dry-run]
"""

from __future__ import annotations

import argparse

from vocab_trainer import config
from vocab_trainer.importer import import_frame, read_vocabulary_csv
from vocab_trainer.stores.mongo_store import MongoVocabularyStore, ensure_indexes


def main():
    parser = argparse.ArgumentParser(description="Import vocabulary CSV into MongoDB")
    parser.add_argument("csv_path", help="CSV with source_text,target_text[,tags] columns")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()

    config.configure_logging()

    df = read_vocabulary_csv(args.csv_path)
    print(f"Loaded {len(df)} rows from {args.csv_path}")

    store = MongoVocabularyStore()
    if not args.dry_run:
        ensure_indexes(store.collection)

    result = import_frame(store, df, dry_run=args.dry_run)

    print("=" * 60)
    print(f"Added:   {len(result.added)}")
    print(f"Skipped: {len(result.skipped)} (already stored)")
    if result.invalid_rows:
        print(f"Invalid rows: {', '.join(str(n) for n in result.invalid_rows)}")
    if args.dry_run:
        print("\n[DRY RUN] No changes made.")


if __name__ == "__main__":
    main()
