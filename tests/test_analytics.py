from datetime import timedelta

import pytest

from brightcards.analytics import build_review_summary, build_stored_summary
from brightcards.fsrs import CardStatus, Grade, ParameterSet, Scheduler, new_card
from brightcards.fsrs.memory_state import ReviewLog


def _log(card_id, grade, when, state_before=CardStatus.REVIEW):
    return ReviewLog(
        card_id=card_id,
        grade=grade,
        review_time=when,
        state_before=state_before,
        state_after=CardStatus.RELEARNING if grade == Grade.AGAIN else CardStatus.REVIEW,
        elapsed_days=5.0,
        retrievability=0.9,
        stability_before=5.0,
        difficulty_before=5.0,
        stability_after=6.0,
        difficulty_after=5.0,
        scheduled_days=6.0,
        due=when + timedelta(days=6),
    )


def test_summary_of_known_log(now):
    logs = [
        _log(1, Grade.GOOD, now),
        _log(2, Grade.AGAIN, now + timedelta(hours=1)),
        _log(3, Grade.EASY, now + timedelta(days=2)),
        _log(1, Grade.HARD, now + timedelta(days=2, hours=1)),
        _log(4, Grade.AGAIN, now, state_before=CardStatus.LEARNING),
    ]

    summary = build_review_summary(logs, desired_retention=0.9)

    assert summary.total_reviews == 5
    assert summary.cards_reviewed == 4
    assert summary.review_state_reviews == 4
    assert summary.true_retention == pytest.approx(0.75)
    assert summary.retention_gap == pytest.approx(-0.15)
    assert summary.grade_counts == {"AGAIN": 2, "HARD": 1, "GOOD": 1, "EASY": 1}
    assert summary.daily_reviews.tolist() == [3, 0, 2]


def test_empty_summary():
    summary = build_review_summary([], desired_retention=0.9)

    assert summary.total_reviews == 0
    assert summary.cards_reviewed == 0
    assert summary.true_retention is None
    assert summary.retention_gap is None
    assert summary.grade_counts == {"AGAIN": 0, "HARD": 0, "GOOD": 0, "EASY": 0}
    assert summary.daily_reviews.empty


def test_stored_summary(db, now):
    db.save_card(new_card(1, now=now))
    scheduler = Scheduler(ParameterSet(enable_fuzzing=False))
    card = db.load_card(1)
    for grade in (Grade.GOOD, Grade.GOOD):
        card, log = scheduler.submit_review(card, grade, max(now, card.due))
        db.save_review(card, log)

    summary = build_stored_summary(0.9)

    assert summary.total_reviews == 2
    assert summary.true_retention is None
    assert summary.grade_counts["GOOD"] == 2
