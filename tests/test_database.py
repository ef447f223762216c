from datetime import timedelta, timezone

import pytest

from brightcards.fsrs import CardNotFound, CardStatus, Grade, InvalidInput, Scheduler, ParameterSet, new_card
from brightcards.fsrs import scheduling


def test_card_round_trip(db, now, review_card_factory):
    card = review_card_factory(card_id=11, deck_id=3)
    db.save_card(card)

    loaded = db.load_card(11)

    assert loaded == card
    assert loaded.due.tzinfo is not None


def test_new_card_round_trip(db, now):
    card = new_card(12, deck_id=1, now=now)
    db.save_card(card)
    assert db.load_card(12) == card


def test_non_utc_timestamps_normalised(db, now):
    local = now.astimezone(timezone(timedelta(hours=2)))
    db.save_card(new_card(13, now=local))
    loaded = db.load_card(13)
    assert loaded.due == now
    assert loaded.due.utcoffset() == timedelta(0)


def test_missing_card(db):
    assert db.load_card(999) is None


def test_save_updates_existing(db, now):
    db.save_card(new_card(1, now=now))
    scheduler = Scheduler(ParameterSet(enable_fuzzing=False))
    updated, _ = scheduler.submit_review(db.load_card(1), Grade.GOOD, now)
    db.save_card(updated)

    assert db.load_card(1).state == CardStatus.LEARNING
    assert len(db.load_cards()) == 1


def test_load_cards_by_deck(db, now):
    db.batch_save_cards([new_card(1, deck_id=1, now=now), new_card(2, deck_id=2, now=now)])
    assert [c.card_id for c in db.load_cards(deck_id=2)] == [2]
    assert [c.card_id for c in db.load_cards()] == [1, 2]


def test_due_cards_ordering(db, now):
    db.batch_save_cards([
        new_card(1, now=now),
        new_card(2, now=now + timedelta(days=1)),
        new_card(3, now=now - timedelta(days=1)),
    ])
    assert [c.card_id for c in db.get_due_cards(now)] == [3, 1]


def test_save_review_appends_log(db, now):
    db.save_card(new_card(1, now=now))
    scheduler = Scheduler(ParameterSet(enable_fuzzing=False))
    updated, log = scheduler.submit_review(db.load_card(1), Grade.HARD, now)

    db.save_review(updated, log)

    assert db.load_card(1) == updated
    logs = db.get_review_logs(1)
    assert logs == [log]
    assert db.get_recent_review_logs(limit=5) == [log]


def test_review_logs_are_append_only(db, now):
    db.save_card(new_card(1, now=now))
    scheduler = Scheduler(ParameterSet(enable_fuzzing=False))
    card = db.load_card(1)
    for minutes in (0, 5, 20):
        card, log = scheduler.submit_review(card, Grade.AGAIN, now + timedelta(minutes=minutes))
        db.save_review(card, log)

    logs = db.get_review_logs()
    assert [log.review_time for log in logs] == [now + timedelta(minutes=m) for m in (0, 5, 20)]
    assert [log.review_time for log in db.get_recent_review_logs(limit=2)] == [
        now + timedelta(minutes=20),
        now + timedelta(minutes=5),
    ]


def test_reset_db(db, now):
    db.save_card(new_card(1, now=now))
    db.reset_db()
    assert db.load_cards() == []


# ---- Review service ----

def test_review_card_service(db, now):
    db.save_card(new_card(1, now=now))
    scheduler = Scheduler(ParameterSet(enable_fuzzing=False))

    card, log = scheduling.review_card(1, "good", now, scheduler=scheduler)

    assert card.state == CardStatus.LEARNING
    assert db.load_card(1) == card
    assert db.get_review_logs(1) == [log]


def test_review_card_not_found(db, now):
    with pytest.raises(CardNotFound) as excinfo:
        scheduling.review_card(42, Grade.GOOD, now)
    assert excinfo.value.card_id == 42


def test_review_card_invalid_input_saves_nothing(db, now):
    db.save_card(new_card(1, now=now))
    with pytest.raises(InvalidInput):
        scheduling.review_card(1, "perfect", now)
    assert db.load_card(1).state == CardStatus.NEW
    assert db.get_review_logs() == []


def test_default_scheduler_reads_environment(db, monkeypatch):
    monkeypatch.setenv("BRIGHTCARDS_DESIRED_RETENTION", "0.8")
    assert scheduling.get_scheduler().parameters.desired_retention == 0.8
    assert scheduling.get_scheduler() is scheduling.get_scheduler()

    monkeypatch.setenv("BRIGHTCARDS_DESIRED_RETENTION", "0.85")
    assert scheduling.reload_scheduler().parameters.desired_retention == 0.85
