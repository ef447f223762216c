"""
Card State Machine - per-card state transitions.

Graph:
    NEW --(any grade)--> LEARNING
    LEARNING --(ladder step)--> LEARNING --(ladder done)--> REVIEW
    REVIEW --(Hard/Good/Easy)--> REVIEW
    REVIEW --(Again)--> RELEARNING
    RELEARNING --(ladder step)--> RELEARNING --(ladder done)--> REVIEW

NEW is initial-only; nothing ever returns to it. There is no terminal
state: cards cycle between REVIEW and RELEARNING indefinitely.

This module decides which memory model formula applies. It does not
compute long-term intervals or touch timestamps; the scheduler does.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from brightcards.fsrs import learning_steps, memory_model, memory_state
from brightcards.fsrs.constants import SAME_DAY, CardStatus, Grade
from brightcards.fsrs.parameters import ParameterSet


# Successor states reachable from each state
SUCCESSORS = {
    CardStatus.NEW: frozenset({CardStatus.LEARNING}),
    CardStatus.LEARNING: frozenset({CardStatus.LEARNING, CardStatus.REVIEW}),
    CardStatus.REVIEW: frozenset({CardStatus.REVIEW, CardStatus.RELEARNING}),
    CardStatus.RELEARNING: frozenset({CardStatus.RELEARNING, CardStatus.REVIEW}),
}


@dataclass(frozen=True)
class Transition:
    """
    Result of applying one grade to one card state.

    delay is the ladder delay while the card stays on a ladder; None means
    the next interval comes from the long-term model.
    """
    state: CardStatus
    stability: float
    difficulty: float
    step: Optional[int]
    delay: Optional[timedelta]
    retrievability: Optional[float]
    lapsed: bool = False


def transition(
    card: memory_state.Card,
    grade: Grade,
    elapsed_days: float,
    params: ParameterSet
) -> Transition:
    """
    Apply a grade to a card and return the resulting state.

    Args:
        card: Card snapshot before the review
        grade: Review grade
        elapsed_days: Days since the card's last review (0 for NEW)
        params: Parameter set

    Returns:
        Transition describing the new state and memory values
    """
    if card.state == CardStatus.NEW:
        return _from_new(grade, params)

    retrievability = memory_state.calculate_retrievability(card.stability, elapsed_days)

    if card.state == CardStatus.REVIEW:
        return _from_review(card, grade, retrievability, params)

    return _from_ladder(card, grade, elapsed_days, retrievability, params)


def _from_new(grade: Grade, params: ParameterSet) -> Transition:
    """First review: initial formulas, then onto the learning ladder."""
    weights = params.weights
    outcome = learning_steps.first_exposure(grade, params.learning_steps)
    return Transition(
        state=CardStatus.LEARNING,
        stability=memory_model.initial_stability(grade, weights),
        difficulty=memory_model.initial_difficulty(grade, weights),
        step=outcome.step,
        delay=outcome.delay,
        retrievability=None,
    )


def _from_review(
    card: memory_state.Card,
    grade: Grade,
    retrievability: float,
    params: ParameterSet
) -> Transition:
    """Long-term review: success stays in REVIEW, a lapse starts relearning."""
    weights = params.weights
    difficulty = memory_model.next_difficulty(card.difficulty, grade, weights)

    if grade == Grade.AGAIN:
        stability = memory_model.stability_after_failure(
            card.stability, card.difficulty, retrievability, weights
        )
        outcome = learning_steps.advance(None, Grade.AGAIN, params.relearning_steps)
        return Transition(
            state=CardStatus.RELEARNING,
            stability=stability,
            difficulty=difficulty,
            step=outcome.step,
            delay=outcome.delay,
            retrievability=retrievability,
            lapsed=True,
        )

    stability = memory_model.stability_after_success(
        card.stability, card.difficulty, retrievability, grade, weights
    )
    return Transition(
        state=CardStatus.REVIEW,
        stability=stability,
        difficulty=difficulty,
        step=None,
        delay=None,
        retrievability=retrievability,
    )


def _from_ladder(
    card: memory_state.Card,
    grade: Grade,
    elapsed_days: float,
    retrievability: float,
    params: ParameterSet
) -> Transition:
    """
    LEARNING or RELEARNING step.

    Same-day steps leave stability alone; only difficulty moves. A step
    taken a day or more after the previous review is a genuine spaced
    retrieval and goes through the long-term stability formulas.
    """
    weights = params.weights
    steps = (
        params.learning_steps
        if card.state == CardStatus.LEARNING
        else params.relearning_steps
    )

    stability = card.stability
    if elapsed_days >= SAME_DAY:
        if grade == Grade.AGAIN:
            stability = memory_model.stability_after_failure(
                card.stability, card.difficulty, retrievability, weights
            )
        else:
            stability = memory_model.stability_after_success(
                card.stability, card.difficulty, retrievability, grade, weights
            )

    difficulty = memory_model.next_difficulty(card.difficulty, grade, weights)
    outcome = learning_steps.advance(card.step, grade, steps)

    if outcome.graduated:
        return Transition(
            state=CardStatus.REVIEW,
            stability=stability,
            difficulty=difficulty,
            step=None,
            delay=None,
            retrievability=retrievability,
        )

    return Transition(
        state=card.state,
        stability=stability,
        difficulty=difficulty,
        step=outcome.step,
        delay=outcome.delay,
        retrievability=retrievability,
    )
