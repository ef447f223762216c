"""
Reset the scheduling database.

DANGEROUS: This deletes all card state and review history!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_learning_db
    python -m scripts.maintenance.reset_learning_db --yes
"""

import argparse
from typing import Optional

from brightcards.fsrs import database


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reset the scheduling database")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("WARNING: Reset Scheduling Database")
    print("=" * 60)
    print()
    print("This will DELETE all scheduling data:")
    print("  - All card states (stability, difficulty, due dates)")
    print("  - All review logs")
    print()

    if not args.yes:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")
        if response.lower() != "yes":
            print("\nCancelled. No changes made.")
            return 1

    print("\nResetting database...")
    database.reset_db()
    print("Database reset complete!")
    print("\nThe database now has empty tables ready for new reviews.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
