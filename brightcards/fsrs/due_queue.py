"""
Due-Queue Builder - filter and order cards that are due.

Pure functions over whatever cards the caller fetched. The result is a
point-in-time snapshot; reviews completing afterwards can make it stale.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable, Optional

from brightcards.fsrs.memory_state import Card, require_aware


def is_due(card: Card, now: datetime) -> bool:
    """A card of any state is eligible once its due timestamp has passed."""
    return card.due <= now


def build_due_queue(
    cards: Iterable[Card],
    now: datetime,
    deck_id: Optional[int] = None
) -> list[Card]:
    """
    Cards due at `now`, earliest due first.

    Args:
        cards: Candidate cards (from one deck or all decks)
        now: Reference instant
        deck_id: Optional deck scope

    Returns:
        Due cards ordered by (due, card_id); ties on due are broken by
        ascending card id so the order is deterministic

    Raises:
        InvalidInput: if `now` is naive
    """
    require_aware(now, "now")
    due_cards = [
        card for card in cards
        if is_due(card, now) and (deck_id is None or card.deck_id == deck_id)
    ]
    due_cards.sort(key=lambda c: (c.due, c.card_id))
    return due_cards


def count_due(cards: Iterable[Card], now: datetime) -> dict[Optional[int], int]:
    """Number of due cards per deck id (None for cards without a deck)."""
    require_aware(now, "now")
    return dict(Counter(card.deck_id for card in cards if is_due(card, now)))
