"""
Scheduler - one review event end to end.

Pure scheduling logic (no database calls).

Main workflow:
1. Validate grade, timestamp and card snapshot
2. Compute elapsed days since the last review
3. Dispatch to the card state machine
4. Compute the next interval (ladder delay or long-term interval + fuzz)
5. Return the updated card + review log

Loading the card before and saving it afterwards is the caller's job.
"""

from __future__ import annotations

import dataclasses
import math
import random
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple, Union

from brightcards.fsrs import memory_model, memory_state, state_machine
from brightcards.fsrs.constants import (
    D_MAX,
    D_MIN,
    FUZZ_MIN_INTERVAL,
    GRADE_ALIASES,
    CardStatus,
    Grade,
)
from brightcards.fsrs.errors import InvalidInput
from brightcards.fsrs.parameters import ParameterSet


def parse_grade(value: Union[Grade, int, str]) -> Grade:
    """
    Normalise a grade given as a Grade, an int 1-4 or a name.

    Raises:
        InvalidInput: for anything else
    """
    if isinstance(value, Grade):
        return value
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid grade: {value!r}")
    if isinstance(value, int):
        try:
            return Grade(value)
        except ValueError as e:
            raise InvalidInput(f"Invalid grade: {value!r}") from e
    if isinstance(value, str):
        grade = GRADE_ALIASES.get(value.strip().lower())
        if grade is not None:
            return grade
    raise InvalidInput(f"Invalid grade: {value!r}")


def _check_snapshot(card: memory_state.Card) -> None:
    """A reviewed card must carry a usable memory state."""
    if card.state == CardStatus.NEW:
        return
    if card.last_review is None:
        raise InvalidInput(f"Card {card.card_id!r} is {card.state.value} but was never reviewed")
    if card.stability is None or not math.isfinite(card.stability) or card.stability <= 0:
        raise InvalidInput(f"Card {card.card_id!r} has invalid stability {card.stability!r}")
    if card.difficulty is None or not D_MIN <= card.difficulty <= D_MAX:
        raise InvalidInput(f"Card {card.card_id!r} has invalid difficulty {card.difficulty!r}")


class Scheduler:
    """
    Stateless review processor bound to one parameter set.

    Safe to share across threads: nothing is mutated after construction.
    """

    def __init__(self, parameters: Optional[ParameterSet] = None):
        self.parameters = parameters or ParameterSet()

    def with_parameters(self, parameters: ParameterSet) -> "Scheduler":
        """New scheduler with different weights; existing cards are untouched."""
        return Scheduler(parameters)

    def submit_review(
        self,
        card: memory_state.Card,
        grade: Union[Grade, int, str],
        review_time: Optional[datetime] = None
    ) -> Tuple[memory_state.Card, memory_state.ReviewLog]:
        """
        Process a review and return the updated card + its review log.

        Args:
            card: Card snapshot (not modified)
            grade: Review grade (Grade, 1-4, or name)
            review_time: When the review happened (defaults to now, UTC)

        Returns:
            Tuple of (updated_card, review_log)

        Raises:
            InvalidInput: bad grade, naive or out-of-order timestamp,
                          corrupt card snapshot
            NumericFailure: a formula produced a non-finite value
        """
        grade = parse_grade(grade)
        if review_time is None:
            review_time = datetime.now(timezone.utc)
        memory_state.require_aware(review_time, "review_time")
        _check_snapshot(card)

        if card.last_review is not None and review_time < card.last_review:
            raise InvalidInput(
                f"review_time {review_time.isoformat()} is before last review "
                f"{card.last_review.isoformat()}"
            )

        elapsed = memory_state.elapsed_days(card.last_review, review_time)
        result = state_machine.transition(card, grade, elapsed, self.parameters)

        if result.delay is not None:
            interval = result.delay
        else:
            days = self._review_interval(result.stability)
            days = self._apply_fuzz(days, card.card_id, review_time)
            interval = timedelta(days=days)

        scheduled_days = interval.total_seconds() / memory_state.SECONDS_PER_DAY
        try:
            due = review_time + interval
        except OverflowError as e:
            raise InvalidInput(
                f"Due date for review at {review_time.isoformat()} is out of range"
            ) from e

        updated = dataclasses.replace(
            card,
            state=result.state,
            stability=result.stability,
            difficulty=result.difficulty,
            step=result.step,
            due=due,
            last_review=review_time,
            reps=card.reps + 1,
            lapses=card.lapses + (1 if result.lapsed else 0),
            scheduled_days=scheduled_days,
        )

        log = memory_state.ReviewLog(
            card_id=card.card_id,
            grade=grade,
            review_time=review_time,
            state_before=card.state,
            state_after=result.state,
            elapsed_days=elapsed,
            retrievability=result.retrievability,
            stability_before=card.stability,
            difficulty_before=card.difficulty,
            stability_after=result.stability,
            difficulty_after=result.difficulty,
            scheduled_days=scheduled_days,
            due=due,
        )

        return updated, log

    def retrievability(self, card: memory_state.Card, now: Optional[datetime] = None) -> Optional[float]:
        """Current recall probability of a card (None for NEW cards)."""
        if now is None:
            now = datetime.now(timezone.utc)
        return memory_state.card_retrievability(card, now)

    def _clamp_interval(self, days: float) -> float:
        params = self.parameters
        return max(params.minimum_interval, min(params.maximum_interval, days))

    def _review_interval(self, stability: float) -> float:
        """Whole days until R reaches desired retention, clamped to bounds."""
        raw = memory_model.interval_for_stability(stability, self.parameters.desired_retention)
        return self._clamp_interval(float(round(raw)))

    def _apply_fuzz(self, days: float, card_id, review_time: datetime) -> float:
        """
        Shift an interval by a whole number of days so cards graded together
        do not all come due on the same day.

        The offset is drawn from +/- round(days * fuzz_factor), at least one
        day. The random draw is seeded from the card id and review time, so
        the same review always produces the same interval.
        """
        params = self.parameters
        if not params.enable_fuzzing or params.fuzz_factor <= 0 or days < FUZZ_MIN_INTERVAL:
            return days

        fuzz_range = max(1, round(days * params.fuzz_factor))
        rng = random.Random(f"{card_id}:{review_time.isoformat()}")
        return self._clamp_interval(days + rng.randint(-fuzz_range, fuzz_range))
