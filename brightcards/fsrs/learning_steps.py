"""
Learning Steps - the short-step ladder for LEARNING and RELEARNING cards.

While a card is on a ladder its next review is minutes or hours away and
is taken from configuration, not from the memory model.

Ladder rules:
- AGAIN: back to the first step
- HARD:  repeat the current step (on the first step, wait halfway to the
         second step, or 1.5x a single step)
- GOOD:  move to the next step; graduate past the last one
- EASY:  graduate immediately
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence

from brightcards.fsrs.constants import Grade


@dataclass(frozen=True)
class LadderOutcome:
    """Where a card lands on the ladder. step is None once it graduates."""
    step: Optional[int]
    delay: Optional[timedelta]

    @property
    def graduated(self) -> bool:
        return self.step is None


GRADUATED = LadderOutcome(step=None, delay=None)


def _hard_delay(step: int, steps: Sequence[timedelta]) -> timedelta:
    if step == 0:
        if len(steps) >= 2:
            return (steps[0] + steps[1]) / 2
        return steps[0] * 1.5
    return steps[step]


def advance(step: Optional[int], grade: Grade, steps: Sequence[timedelta]) -> LadderOutcome:
    """
    Move a card along the ladder after one review.

    Args:
        step: Current ladder index (None is treated as the first step; an
              index past the end, e.g. after the ladder was shortened, is
              treated as the last step)
        grade: Review grade
        steps: Ladder step durations (non-empty)

    Returns:
        LadderOutcome with the next step and its delay, or GRADUATED
    """
    current = min(step or 0, len(steps) - 1)

    if grade == Grade.AGAIN:
        return LadderOutcome(step=0, delay=steps[0])

    if grade == Grade.HARD:
        return LadderOutcome(step=current, delay=_hard_delay(current, steps))

    if grade == Grade.GOOD:
        following = current + 1
        if following >= len(steps):
            return GRADUATED
        return LadderOutcome(step=following, delay=steps[following])

    return GRADUATED


def first_exposure(grade: Grade, steps: Sequence[timedelta]) -> LadderOutcome:
    """
    Place a NEW card on the learning ladder.

    A first review never graduates: a grade that would finish the ladder
    leaves the card on the last step instead.
    """
    outcome = advance(0, grade, steps)
    if outcome.graduated:
        last = len(steps) - 1
        return LadderOutcome(step=last, delay=steps[last])
    return outcome
