"""
Reset the session log database.

DANGEROUS: This deletes all playback sessions and review history!
Vocabulary items and their schedules are not touched.

Usage:
    python -m scripts.maintenance.reset_session_log
"""

from vocab_trainer.stores.database import create_session_log


def main():
    print("=" * 60)
    print("WARNING: Reset Session Log")
    print("=" * 60)
    print()
    print("This will DELETE:")
    print("  - All playback session records")
    print("  - All review events (logs of past reviews)")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        create_session_log().reset_db()
        print("Database reset complete!")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
