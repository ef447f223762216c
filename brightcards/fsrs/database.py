"""
Database - store I/O for card state and review logs.

Uses SQLAlchemy ORM. Any SQLAlchemy URL works; the default is a SQLite
file under ~/.brightcards.

This module handles ONLY database I/O.
Algorithm logic is handled by the scheduler module.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from brightcards.fsrs.constants import CardStatus, Grade
from brightcards.fsrs.due_queue import build_due_queue
from brightcards.fsrs.memory_state import Card, ReviewLog
from brightcards.fsrs.models import Base, CardStateRecord, ReviewLogRecord

logger = logging.getLogger(__name__)

DB_DIR = Path.home() / ".brightcards"
DB_NAME = "bcards.db"


# ---- Configuration ----

def get_database_url() -> str:
    """
    Get the database URL.

    Reads DATABASE_URL (a .env file is honoured). Without it, a SQLite
    file in ~/.brightcards is used and the directory is created.
    """
    load_dotenv()
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    DB_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{DB_DIR / DB_NAME}"


@lru_cache(maxsize=None)
def _engine_for(url: str) -> Engine:
    logger.debug("Creating engine for %s", url)
    return create_engine(url, pool_pre_ping=True, echo=False)


def get_engine() -> Engine:
    """SQLAlchemy engine for the configured URL (one per URL per process)."""
    return _engine_for(get_database_url())


def get_session() -> Session:
    """
    Get a SQLAlchemy session for database operations.

    Returns:
        SQLAlchemy Session instance
    """
    SessionLocal = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return SessionLocal()


def init_db():
    """
    Create tables if they don't exist.

    Safe to call multiple times.
    """
    engine = get_engine()
    existing_tables = set(inspect(engine).get_table_names())
    if {'card_state', 'review_logs'} <= existing_tables:
        return
    Base.metadata.create_all(engine)
    logger.info("Created scheduling tables")


def reset_db():
    """
    DANGEROUS: Delete all data and recreate tables.

    All card state and review history will be lost!
    """
    engine = get_engine()
    Base.metadata.drop_all(engine)
    logger.warning("Dropped all scheduling tables")
    init_db()


# ---- Conversion ----

def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store everything in UTC so comparisons work on every backend."""
    if value is None:
        return None
    return value.astimezone(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on read; values were written as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_card(record: CardStateRecord) -> Card:
    return Card(
        card_id=record.card_id,
        deck_id=record.deck_id,
        state=CardStatus(record.state),
        stability=record.stability,
        difficulty=record.difficulty,
        due=_as_utc(record.due),
        last_review=_as_utc(record.last_review),
        step=record.step,
        reps=record.reps,
        lapses=record.lapses,
        scheduled_days=record.scheduled_days,
    )


def _apply_card(record: CardStateRecord, card: Card):
    record.deck_id = card.deck_id
    record.state = card.state.value
    record.stability = card.stability
    record.difficulty = card.difficulty
    record.due = _to_utc(card.due)
    record.last_review = _to_utc(card.last_review)
    record.step = card.step
    record.reps = card.reps
    record.lapses = card.lapses
    record.scheduled_days = card.scheduled_days


def _to_record(log: ReviewLog) -> ReviewLogRecord:
    return ReviewLogRecord(
        card_id=log.card_id,
        grade=int(log.grade),
        review_time=_to_utc(log.review_time),
        state_before=log.state_before.value,
        state_after=log.state_after.value,
        elapsed_days=log.elapsed_days,
        retrievability=log.retrievability,
        stability_before=log.stability_before,
        difficulty_before=log.difficulty_before,
        stability_after=log.stability_after,
        difficulty_after=log.difficulty_after,
        scheduled_days=log.scheduled_days,
        due=_to_utc(log.due),
    )


def _to_log(record: ReviewLogRecord) -> ReviewLog:
    return ReviewLog(
        card_id=record.card_id,
        grade=Grade(record.grade),
        review_time=_as_utc(record.review_time),
        state_before=CardStatus(record.state_before),
        state_after=CardStatus(record.state_after),
        elapsed_days=record.elapsed_days,
        retrievability=record.retrievability,
        stability_before=record.stability_before,
        difficulty_before=record.difficulty_before,
        stability_after=record.stability_after,
        difficulty_after=record.difficulty_after,
        scheduled_days=record.scheduled_days,
        due=_as_utc(record.due),
    )


# ---- Card state ----

def load_card(card_id: int) -> Optional[Card]:
    """
    Load a card snapshot.

    Returns:
        Card if found, None otherwise
    """
    session = get_session()
    try:
        record = session.get(CardStateRecord, card_id)
        if record is None:
            return None
        return _to_card(record)
    finally:
        session.close()


def load_cards(deck_id: Optional[int] = None) -> list[Card]:
    """All cards, optionally limited to one deck."""
    session = get_session()
    try:
        query = session.query(CardStateRecord)
        if deck_id is not None:
            query = query.filter(CardStateRecord.deck_id == deck_id)
        return [_to_card(record) for record in query.order_by(CardStateRecord.card_id).all()]
    finally:
        session.close()


def _upsert_card(session: Session, card: Card):
    record = session.get(CardStateRecord, card.card_id)
    if record is None:
        record = CardStateRecord(card_id=card.card_id)
        session.add(record)
    _apply_card(record, card)


def save_card(card: Card):
    """
    Save card state (insert or update).

    Args:
        card: Card to save
    """
    session = get_session()
    try:
        _upsert_card(session, card)
        session.commit()
    finally:
        session.close()


def batch_save_cards(cards: list[Card]):
    """Save multiple cards in a single transaction."""
    if not cards:
        return

    session = get_session()
    try:
        for card in cards:
            _upsert_card(session, card)
        session.commit()
    finally:
        session.close()


# ---- Review logs ----

def append_review_log(log: ReviewLog):
    """Append one review log entry. Entries are never updated."""
    session = get_session()
    try:
        session.add(_to_record(log))
        session.commit()
    finally:
        session.close()


def save_review(card: Card, log: ReviewLog):
    """
    Persist an updated card and its review log in one transaction.

    Either both are written or neither is.
    """
    session = get_session()
    try:
        _upsert_card(session, card)
        session.add(_to_record(log))
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_review_logs(card_id: Optional[int] = None) -> list[ReviewLog]:
    """
    Review logs in chronological order.

    Args:
        card_id: Restrict to one card (all cards if None)
    """
    session = get_session()
    try:
        query = session.query(ReviewLogRecord)
        if card_id is not None:
            query = query.filter(ReviewLogRecord.card_id == card_id)
        records = query.order_by(ReviewLogRecord.review_time, ReviewLogRecord.id).all()
        return [_to_log(record) for record in records]
    finally:
        session.close()


def get_recent_review_logs(limit: int = 10) -> list[ReviewLog]:
    """
    Most recent review logs (newest first).

    Args:
        limit: Maximum number of entries
    """
    session = get_session()
    try:
        records = session.query(ReviewLogRecord).order_by(
            ReviewLogRecord.review_time.desc(),
            ReviewLogRecord.id.desc()
        ).limit(limit).all()
        return [_to_log(record) for record in records]
    finally:
        session.close()


# ---- Queries ----

def get_due_cards(now: Optional[datetime] = None, deck_id: Optional[int] = None) -> list[Card]:
    """
    Cards due at `now`, ordered by the due-queue rules.

    Args:
        now: Reference instant (defaults to now, UTC)
        deck_id: Optional deck scope

    Returns:
        Due cards, earliest due first
    """
    if now is None:
        now = datetime.now(timezone.utc)

    session = get_session()
    try:
        query = session.query(CardStateRecord).filter(CardStateRecord.due <= _to_utc(now))
        if deck_id is not None:
            query = query.filter(CardStateRecord.deck_id == deck_id)
        cards = [_to_card(record) for record in query.all()]
    finally:
        session.close()

    return build_due_queue(cards, now, deck_id=deck_id)
