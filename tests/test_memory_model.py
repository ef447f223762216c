import math

import pytest

from brightcards.fsrs import memory_model
from brightcards.fsrs.constants import DEFAULT_WEIGHTS, S0_MIN, Grade
from brightcards.fsrs.errors import NumericFailure
from brightcards.fsrs.memory_state import calculate_retrievability

W = DEFAULT_WEIGHTS

DIFFICULTIES = [1.0, 1.5, 2.0, 3.3, 5.0, 6.7, 8.0, 9.5, 10.0]
STABILITIES = [0.01, 0.5, 1.0, 10.0, 100.0, 1000.0, 36500.0]
RETRIEVABILITIES = [0.01, 0.3, 0.7, 0.9, 0.99, 1.0]


def test_initial_difficulty_decreases_with_grade():
    values = [memory_model.initial_difficulty(g, W) for g in Grade]
    assert values == sorted(values, reverse=True)
    assert all(1.0 <= v <= 10.0 for v in values)
    # D0(AGAIN) = w4 - e^0 + 1 = w4
    assert values[0] == pytest.approx(W[4])


def test_initial_difficulty_is_clamped():
    weights = list(W)
    weights[4] = 1.0
    weights[5] = 4.0
    assert memory_model.initial_difficulty(Grade.EASY, weights) == 1.0


def test_initial_stability_uses_grade_weight():
    for grade in Grade:
        assert memory_model.initial_stability(grade, W) == W[int(grade) - 1]


def test_initial_stability_has_floor():
    weights = list(W)
    weights[0] = 0.01
    assert memory_model.initial_stability(Grade.AGAIN, weights) == S0_MIN


@pytest.mark.parametrize("grade", list(Grade))
def test_next_difficulty_stays_in_bounds(grade):
    for d in DIFFICULTIES:
        value = memory_model.next_difficulty(d, grade, W)
        assert 1.0 <= value <= 10.0


def test_next_difficulty_direction():
    assert memory_model.next_difficulty(5.0, Grade.AGAIN, W) > 5.0
    assert memory_model.next_difficulty(5.0, Grade.EASY, W) < 5.0


def test_next_difficulty_good_reverts_toward_easy_baseline():
    target = memory_model.initial_difficulty(Grade.EASY, W)
    expected = W[7] * target + (1 - W[7]) * 5.0
    assert memory_model.next_difficulty(5.0, Grade.GOOD, W) == pytest.approx(expected)


@pytest.mark.parametrize("grade", [Grade.HARD, Grade.GOOD, Grade.EASY])
def test_success_stability_positive(grade):
    for s in STABILITIES:
        for d in DIFFICULTIES:
            for r in RETRIEVABILITIES:
                assert memory_model.stability_after_success(s, d, r, grade, W) > 0


def test_failure_stability_positive_and_not_above_prior():
    for s in STABILITIES:
        for d in DIFFICULTIES:
            for r in RETRIEVABILITIES:
                value = memory_model.stability_after_failure(s, d, r, W)
                assert value > 0
                assert value <= s


def test_success_grows_stability_below_full_recall():
    s = memory_model.stability_after_success(10.0, 5.0, 0.9, Grade.GOOD, W)
    assert s > 10.0


def test_success_bonus_ordering():
    hard = memory_model.stability_after_success(10.0, 5.0, 0.9, Grade.HARD, W)
    good = memory_model.stability_after_success(10.0, 5.0, 0.9, Grade.GOOD, W)
    easy = memory_model.stability_after_success(10.0, 5.0, 0.9, Grade.EASY, W)
    assert hard < good < easy


def test_success_at_full_retrievability_keeps_stability():
    assert memory_model.stability_after_success(10.0, 5.0, 1.0, Grade.GOOD, W) == pytest.approx(10.0)


def test_success_rejects_again():
    with pytest.raises(ValueError):
        memory_model.stability_after_success(10.0, 5.0, 0.9, Grade.AGAIN, W)


def test_retrievability_curve():
    assert calculate_retrievability(10.0, 0.0) == 1.0
    assert calculate_retrievability(10.0, -1.0) == 1.0
    assert calculate_retrievability(10.0, 10.0) == pytest.approx(0.9)
    assert calculate_retrievability(10.0, 5.0) > calculate_retrievability(10.0, 20.0)


def test_interval_inverts_retrievability():
    assert memory_model.interval_for_stability(10.0, 0.9) == pytest.approx(10.0)
    t = memory_model.interval_for_stability(10.0, 0.8)
    assert calculate_retrievability(10.0, t) == pytest.approx(0.8)


def test_non_finite_stability_fails_closed():
    with pytest.raises(NumericFailure):
        memory_model.stability_after_success(math.nan, 5.0, 0.9, Grade.GOOD, W)
    with pytest.raises(NumericFailure):
        memory_model.stability_after_failure(math.inf, 5.0, 0.9, W)


def test_non_finite_difficulty_fails_closed():
    with pytest.raises(NumericFailure):
        memory_model.next_difficulty(math.inf, Grade.GOOD, W)


def test_interval_overflow_fails_closed():
    with pytest.raises(NumericFailure):
        memory_model.interval_for_stability(1e308, 0.5)


def test_ensure_finite():
    assert memory_model.ensure_finite("x", 1.5) == 1.5
    with pytest.raises(NumericFailure) as excinfo:
        memory_model.ensure_finite("x", math.nan)
    assert excinfo.value.quantity == "x"
