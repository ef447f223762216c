"""
Review cards from the shell.

Usage:
    # Register a new card (immediately due)
    python -m scripts.review add 42 --deck 1

    # List due cards (all decks, or one deck)
    python -m scripts.review due
    python -m scripts.review due --deck 1

    # Grade a card (again / hard / good / easy, or 1-4)
    python -m scripts.review review 42 good

    # Retention summary over the review log
    python -m scripts.review stats
"""

import argparse
import logging
from datetime import datetime, timezone
from typing import Optional

from brightcards import fsrs
from brightcards.analytics import build_stored_summary
from brightcards.fsrs import database, scheduling


def format_card(card: fsrs.Card, now: datetime) -> str:
    """One-line description of a card's scheduling state."""
    retrievability = fsrs.card_retrievability(card, now)
    parts = [
        f"#{card.card_id}",
        f"deck={card.deck_id if card.deck_id is not None else '-'}",
        f"state={card.state.value}",
        f"due={card.due.isoformat(timespec='minutes')}",
    ]
    if card.stability is not None:
        parts.append(f"S={card.stability:.2f}d")
        parts.append(f"D={card.difficulty:.2f} ({fsrs.difficulty_label(card.difficulty)})")
    if retrievability is not None:
        parts.append(f"R={retrievability:.0%}")
    parts.append(f"reps={card.reps} lapses={card.lapses}")
    return "  ".join(parts)


def cmd_add(args) -> int:
    if database.load_card(args.card_id) is not None:
        print(f"Card #{args.card_id} already exists.")
        return 1
    card = fsrs.new_card(args.card_id, deck_id=args.deck)
    database.save_card(card)
    print(f"Added card #{card.card_id} (due now)")
    return 0


def cmd_due(args) -> int:
    now = datetime.now(timezone.utc)
    cards = database.get_due_cards(now, deck_id=args.deck)
    if not cards:
        print("No cards due.")
        return 0

    if args.limit:
        cards = cards[:args.limit]

    print(f"\n{len(cards)} card(s) due\n")
    for card in cards:
        print(format_card(card, now))
    return 0


def cmd_review(args) -> int:
    card, log = scheduling.review_card(args.card_id, args.grade)
    print(f"Graded #{card.card_id} {log.grade.name}: {log.state_before.value} -> {log.state_after.value}")
    print(format_card(card, log.review_time))
    return 0


def cmd_stats(args) -> int:
    retention = scheduling.get_scheduler().parameters.desired_retention
    summary = build_stored_summary(retention, card_id=args.card)

    print(f"Reviews:        {summary.total_reviews}")
    print(f"Cards reviewed: {summary.cards_reviewed}")
    if summary.true_retention is None:
        print("True retention: n/a (no reviews of graduated cards yet)")
    else:
        print(f"True retention: {summary.true_retention:.1%} (target {summary.desired_retention:.0%})")
    print("Grades:         " + ", ".join(f"{name}={count}" for name, count in summary.grade_counts.items()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Review flashcards with FSRS scheduling")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable INFO logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Register a new card")
    add.add_argument("card_id", type=int)
    add.add_argument("--deck", type=int, default=None, help="Deck id")
    add.set_defaults(func=cmd_add)

    due = subparsers.add_parser("due", help="List due cards")
    due.add_argument("--deck", type=int, default=None, help="Only this deck")
    due.add_argument("--limit", type=int, default=None, help="Maximum cards to list")
    due.set_defaults(func=cmd_due)

    review = subparsers.add_parser("review", help="Grade a card")
    review.add_argument("card_id", type=int)
    review.add_argument("grade", help="again, hard, good, easy (or 1-4)")
    review.set_defaults(func=cmd_review)

    stats = subparsers.add_parser("stats", help="Retention summary")
    stats.add_argument("--card", type=int, default=None, help="Only this card")
    stats.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "review" and args.grade.isdigit():
        args.grade = int(args.grade)

    database.init_db()
    try:
        return args.func(args)
    except fsrs.SchedulingError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
