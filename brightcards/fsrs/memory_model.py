"""
Memory Model - stability and difficulty updates.

Pure functions mapping (current state, grade, retrievability) to
(new stability, new difficulty). No I/O, no logging, no mutable state.

Key principles:
- Successful recall at low retrievability produces the largest gains
- Difficult cards gain stability more slowly
- Forgetting follows its own curve, not a perturbation of the success one
- Every result is checked; a non-finite value is an error, never clamped
"""

from __future__ import annotations

import math
from typing import Callable, Sequence

from brightcards.fsrs.constants import D_MAX, D_MIN, DECAY, FACTOR, S0_MIN, S_MIN, Grade
from brightcards.fsrs.errors import NumericFailure


def ensure_finite(quantity: str, value: float) -> float:
    """Return value unchanged, or raise NumericFailure if it is NaN/inf/complex."""
    if isinstance(value, complex) or not math.isfinite(value):
        raise NumericFailure(quantity, value)
    return value


def _evaluate(quantity: str, formula: Callable[[], float]) -> float:
    """Evaluate a formula, turning overflow into NumericFailure."""
    try:
        value = formula()
    except (OverflowError, ZeroDivisionError) as e:
        raise NumericFailure(quantity, math.nan) from e
    return ensure_finite(quantity, value)


def clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))


# ---- First review ----

def initial_difficulty(grade: Grade, weights: Sequence[float]) -> float:
    """
    Difficulty after the very first review.

    Formula: D0(G) = w4 - e^(w5 * (G - 1)) + 1, clamped to [1, 10]
    """
    value = _evaluate(
        "initial difficulty",
        lambda: weights[4] - math.exp(weights[5] * (int(grade) - 1)) + 1.0,
    )
    return clamp_difficulty(value)


def initial_stability(grade: Grade, weights: Sequence[float]) -> float:
    """
    Stability after the very first review: one base weight per grade.

    Floored at S0_MIN so logarithms downstream never see zero.
    """
    value = ensure_finite("initial stability", weights[int(grade) - 1])
    return max(S0_MIN, value)


# ---- Subsequent reviews ----

def next_difficulty(difficulty: float, grade: Grade, weights: Sequence[float]) -> float:
    """
    Update difficulty after a review.

    Formula:
        delta = -w6 * (G - 3)
        D' = D + delta * (10 - D) / 9          (linear damping near the top)
        D'' = w7 * D0(EASY) + (1 - w7) * D'    (mean reversion)

    Returns:
        New difficulty clamped to [1, 10]
    """
    def formula() -> float:
        delta = -weights[6] * (int(grade) - 3)
        damped = difficulty + delta * (D_MAX - difficulty) / 9.0
        target = initial_difficulty(Grade.EASY, weights)
        return weights[7] * target + (1.0 - weights[7]) * damped

    return clamp_difficulty(_evaluate("difficulty", formula))


def stability_after_success(
    stability: float,
    difficulty: float,
    retrievability: float,
    grade: Grade,
    weights: Sequence[float]
) -> float:
    """
    Update stability after a successful recall (Hard/Good/Easy).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1) * bonus)

    Where bonus is w15 for HARD, 1.0 for GOOD and w16 for EASY.
    At R = 1 (reviewed again immediately) the growth term is zero.
    """
    if grade == Grade.AGAIN:
        raise ValueError("Use stability_after_failure for AGAIN")

    if grade == Grade.HARD:
        bonus = weights[15]
    elif grade == Grade.EASY:
        bonus = weights[16]
    else:
        bonus = 1.0

    def formula() -> float:
        growth = (
            math.exp(weights[8])
            * (11.0 - difficulty)
            * stability ** -weights[9]
            * (math.exp(weights[10] * (1.0 - retrievability)) - 1.0)
            * bonus
        )
        return stability * (1.0 + growth)

    return max(S_MIN, _evaluate("stability", formula))


def stability_after_failure(
    stability: float,
    difficulty: float,
    retrievability: float,
    weights: Sequence[float]
) -> float:
    """
    Update stability after a lapse (Again).

    Formula:
        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))

    The result is capped at the prior stability: forgetting never makes
    a memory stronger.
    """
    def formula() -> float:
        return (
            weights[11]
            * difficulty ** -weights[12]
            * ((stability + 1.0) ** weights[13] - 1.0)
            * math.exp(weights[14] * (1.0 - retrievability))
        )

    value = _evaluate("stability", formula)
    return max(S_MIN, min(value, stability))


# ---- Intervals ----

def interval_for_stability(stability: float, desired_retention: float) -> float:
    """
    Days until retrievability falls to desired_retention.

    Inverse of the forgetting curve:
        t = S / FACTOR * (R_target^(1 / DECAY) - 1)

    With desired_retention = 0.9 this is exactly S.
    """
    return _evaluate(
        "interval",
        lambda: stability / FACTOR * (desired_retention ** (1.0 / DECAY) - 1.0),
    )
