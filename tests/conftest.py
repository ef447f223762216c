from datetime import datetime, timedelta, timezone

import pytest

from brightcards.fsrs import CardStatus, ParameterSet, Scheduler, database, scheduling
from brightcards.fsrs.memory_state import Card


ENV_VARS = [
    "BRIGHTCARDS_WEIGHTS",
    "BRIGHTCARDS_DESIRED_RETENTION",
    "BRIGHTCARDS_MAXIMUM_INTERVAL",
    "BRIGHTCARDS_ENABLE_FUZZING",
    "BRIGHTCARDS_PARAMETERS_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of parameter loading."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(scheduling, "_scheduler", None)


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def params():
    """Default parameters with fuzz disabled so intervals are exact."""
    return ParameterSet(enable_fuzzing=False)


@pytest.fixture
def scheduler(params):
    return Scheduler(params)


@pytest.fixture
def review_card_factory(now):
    """Build a REVIEW-state card last reviewed `days_ago` days before `now`."""
    def make(card_id=1, stability=10.0, difficulty=5.0, days_ago=10.0, deck_id=None):
        last_review = now - timedelta(days=days_ago)
        return Card(
            card_id=card_id,
            deck_id=deck_id,
            state=CardStatus.REVIEW,
            stability=stability,
            difficulty=difficulty,
            due=last_review + timedelta(days=round(stability)),
            last_review=last_review,
            reps=5,
            lapses=0,
            scheduled_days=float(round(stability)),
        )
    return make


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Fresh SQLite database per test."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    database.init_db()
    return database
