"""
Memory State - card and review-log records, retrievability.

Key concepts:
- Stability (S): days until recall probability decays to 90%
- Difficulty (D): resistance to stability growth (1-10 scale)
- Retrievability (R): probability of successful recall at time t

Card and ReviewLog are frozen snapshots. The engine never mutates a card
it was handed; every review returns a new Card.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from brightcards.fsrs.constants import (
    DECAY,
    DIFFICULTY_LABEL_MAX,
    DIFFICULTY_LABELS,
    FACTOR,
    CardStatus,
    Grade,
)
from brightcards.fsrs.errors import InvalidInput


CardId = int

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class Card:
    """
    Scheduling snapshot of a single flashcard.

    stability and difficulty are None only while the card is NEW.
    step is the position on the learning/relearning ladder and is None
    outside LEARNING and RELEARNING.
    """
    card_id: CardId
    due: datetime
    state: CardStatus = CardStatus.NEW
    deck_id: Optional[int] = None

    stability: Optional[float] = None   # S, in days
    difficulty: Optional[float] = None  # D, range 1-10

    last_review: Optional[datetime] = None
    step: Optional[int] = None

    reps: int = 0
    lapses: int = 0
    scheduled_days: float = 0.0


@dataclass(frozen=True)
class ReviewLog:
    """Append-only record of one review event."""
    card_id: CardId
    grade: Grade
    review_time: datetime

    state_before: CardStatus
    state_after: CardStatus

    elapsed_days: float
    retrievability: Optional[float]  # None when there was no prior stability

    stability_before: Optional[float]
    difficulty_before: Optional[float]
    stability_after: float
    difficulty_after: float

    scheduled_days: float
    due: datetime


def new_card(
    card_id: CardId,
    deck_id: Optional[int] = None,
    now: Optional[datetime] = None
) -> Card:
    """
    Create a card that has never been reviewed.

    The card is due at creation time, so it is immediately eligible.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    require_aware(now, "now")
    return Card(card_id=card_id, deck_id=deck_id, due=now)


def require_aware(value: datetime, name: str = "timestamp") -> datetime:
    """Reject naive datetimes; elapsed time across time zones is ambiguous."""
    if not isinstance(value, datetime):
        raise InvalidInput(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidInput(f"{name} must be timezone-aware")
    return value


def elapsed_days(since: Optional[datetime], until: datetime) -> float:
    """
    Days between two instants.

    Returns:
        0.0 when `since` is None (card never reviewed)
    """
    if since is None:
        return 0.0
    return (until - since).total_seconds() / SECONDS_PER_DAY


def calculate_retrievability(stability: float, days_since_review: float) -> float:
    """
    Probability of recall after `days_since_review` days.

    Formula: R = (1 + FACTOR * t / S) ** DECAY

    FACTOR and DECAY are chosen so R = 0.9 when t == S. The curve has a
    heavier tail than a plain exponential, matching observed forgetting.

    Returns:
        Retrievability in (0, 1]; exactly 1.0 for t <= 0
    """
    if days_since_review <= 0:
        return 1.0
    return (1.0 + FACTOR * days_since_review / stability) ** DECAY


def card_retrievability(card: Card, now: datetime) -> Optional[float]:
    """Current retrievability of a card, or None if it has no stability yet."""
    if card.stability is None or card.last_review is None:
        return None
    return calculate_retrievability(card.stability, elapsed_days(card.last_review, now))


def difficulty_label(difficulty: Optional[float]) -> Optional[str]:
    """
    User-facing label for a numeric difficulty.

    D < 4 -> "Easy", D < 7 -> "Medium", otherwise "Hard".
    The label is derived on demand and never stored.
    """
    if difficulty is None:
        return None
    for upper, label in DIFFICULTY_LABELS:
        if difficulty < upper:
            return label
    return DIFFICULTY_LABEL_MAX
