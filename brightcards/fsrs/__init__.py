"""
FSRS - Free Spaced Repetition Scheduler

Scheduling engine for brightcards flashcards.

This package implements:
- A closed-form memory model (Stability, Difficulty, Retrievability)
- A per-card state machine (New, Learning, Review, Relearning)
- Short-step learning/relearning ladders
- Due-queue ordering across cards and decks

Quick start:
    from brightcards import fsrs

    scheduler = fsrs.Scheduler(fsrs.load_parameters())

    # Process a review (algorithm only, no DB calls)
    card, review_log = scheduler.submit_review(card, fsrs.Grade.GOOD, now)

    # Order due cards
    queue = fsrs.build_due_queue(cards, now)
"""

# Core scheduler API (algorithm logic)
from brightcards.fsrs.scheduler import Scheduler, parse_grade
from brightcards.fsrs.due_queue import build_due_queue, count_due

# Records
from brightcards.fsrs.memory_state import (
    Card,
    ReviewLog,
    new_card,
    calculate_retrievability,
    card_retrievability,
    difficulty_label,
)

# Parameters
from brightcards.fsrs.parameters import ParameterSet, build_parameters, load_parameters

# Constants
from brightcards.fsrs.constants import CardStatus, Grade, DECAY, FACTOR

# Errors
from brightcards.fsrs.errors import (
    SchedulingError,
    InvalidInput,
    InvalidParameters,
    NumericFailure,
    CardNotFound,
)


__all__ = [
    # Core algorithm
    "Scheduler",
    "parse_grade",
    "build_due_queue",
    "count_due",

    # Records
    "Card",
    "ReviewLog",
    "new_card",
    "calculate_retrievability",
    "card_retrievability",
    "difficulty_label",

    # Parameters
    "ParameterSet",
    "build_parameters",
    "load_parameters",

    # Enums and constants
    "CardStatus",
    "Grade",
    "DECAY",
    "FACTOR",

    # Errors
    "SchedulingError",
    "InvalidInput",
    "InvalidParameters",
    "NumericFailure",
    "CardNotFound",
]
