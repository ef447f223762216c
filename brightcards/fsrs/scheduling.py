"""
Scheduling - review service for the host application.

Ties the store and the pure scheduler together.

Main workflow:
1. Load the card snapshot
2. Submit the review to the scheduler
3. Save the updated card and append the review log

Callers must not review the same card concurrently; the load-update-save
cycle here holds no locks.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Tuple, Union

from brightcards.fsrs import database
from brightcards.fsrs.constants import Grade
from brightcards.fsrs.errors import CardNotFound
from brightcards.fsrs.memory_state import Card, ReviewLog, difficulty_label
from brightcards.fsrs.parameters import load_parameters
from brightcards.fsrs.scheduler import Scheduler

logger = logging.getLogger(__name__)

_scheduler: Optional[Scheduler] = None


def get_scheduler() -> Scheduler:
    """Process-wide scheduler built from the configured parameters."""
    global _scheduler
    if _scheduler is None:
        _scheduler = Scheduler(load_parameters())
    return _scheduler


def reload_scheduler() -> Scheduler:
    """
    Re-read the parameters and rebuild the scheduler.

    Stored cards are not recomputed; new weights apply from the next review.
    """
    global _scheduler
    _scheduler = Scheduler(load_parameters())
    logger.info("Reloaded scheduling parameters")
    return _scheduler


def review_card(
    card_id: int,
    grade: Union[Grade, int, str],
    timestamp: Optional[datetime] = None,
    scheduler: Optional[Scheduler] = None
) -> Tuple[Card, ReviewLog]:
    """
    Review a stored card and persist the result.

    Args:
        card_id: Card identifier
        grade: Review grade (Grade, 1-4, or name)
        timestamp: Review time (defaults to now, UTC)
        scheduler: Scheduler to use (defaults to get_scheduler())

    Returns:
        Tuple of (updated_card, review_log)

    Raises:
        CardNotFound: no card with this id in the store
        InvalidInput, NumericFailure: from the scheduler; nothing is saved
    """
    card = database.load_card(card_id)
    if card is None:
        raise CardNotFound(card_id)

    scheduler = scheduler or get_scheduler()
    updated, log = scheduler.submit_review(card, grade, timestamp)
    database.save_review(updated, log)

    logger.info(
        "Reviewed card %s: %s, %s -> %s, S=%.2f D=%.2f (%s), due %s",
        card_id,
        log.grade.name,
        log.state_before.value,
        log.state_after.value,
        updated.stability,
        updated.difficulty,
        difficulty_label(updated.difficulty),
        updated.due.isoformat(),
    )
    return updated, log
