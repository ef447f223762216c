"""
SQLAlchemy ORM Models for the scheduling store.

Defines CardStateRecord and ReviewLogRecord. Only the fields the engine
reads and writes are stored here; card content lives elsewhere.
"""

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CardStateRecord(Base):
    """
    Persistent scheduling state for a single flashcard.
    """
    __tablename__ = 'card_state'

    card_id = Column(Integer, primary_key=True, autoincrement=False)
    deck_id = Column(Integer, nullable=True, index=True)

    state = Column(String(20), nullable=False)  # CardStatus value

    # Memory model (NULL while the card is new)
    stability = Column(Float, nullable=True)
    difficulty = Column(Float, nullable=True)

    # Scheduling
    due = Column(DateTime(timezone=True), nullable=False, index=True)
    last_review = Column(DateTime(timezone=True), nullable=True)
    step = Column(Integer, nullable=True)  # Ladder position while learning/relearning
    scheduled_days = Column(Float, nullable=False, default=0.0)

    # Counters
    reps = Column(Integer, nullable=False, default=0)
    lapses = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<CardStateRecord({self.card_id}, {self.state}, due={self.due})>"


class ReviewLogRecord(Base):
    """
    Append-only log entry for a single review.

    Keeps before/after memory state so parameters can be re-fitted later.
    """
    __tablename__ = 'review_logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    card_id = Column(Integer, nullable=False, index=True)

    grade = Column(Integer, nullable=False)  # 1=AGAIN, 2=HARD, 3=GOOD, 4=EASY
    review_time = Column(DateTime(timezone=True), nullable=False, index=True)

    state_before = Column(String(20), nullable=False)
    state_after = Column(String(20), nullable=False)

    elapsed_days = Column(Float, nullable=False)
    retrievability = Column(Float, nullable=True)

    # State before review
    stability_before = Column(Float, nullable=True)
    difficulty_before = Column(Float, nullable=True)

    # State after review
    stability_after = Column(Float, nullable=False)
    difficulty_after = Column(Float, nullable=False)

    scheduled_days = Column(Float, nullable=False)
    due = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ReviewLogRecord(id={self.id}, card={self.card_id}, grade={self.grade})>"
