"""
Service layer to assemble review summaries.
"""

from __future__ import annotations

from typing import Iterable, Optional

from brightcards.analytics.metrics import (
    build_day_index,
    compute_daily_reviews,
    compute_grade_counts,
    compute_true_retention,
    logs_to_frame,
)
from brightcards.analytics.types import ReviewSummary
from brightcards.fsrs import database
from brightcards.fsrs.constants import CardStatus
from brightcards.fsrs.memory_state import ReviewLog


def build_review_summary(logs: Iterable[ReviewLog], desired_retention: float) -> ReviewSummary:
    """
    Summarise a review log against the configured target retention.

    A retention_gap well below zero means cards are being forgotten more
    often than the parameters predict.
    """
    logs_df = logs_to_frame(logs)
    day_index = build_day_index(logs_df)
    true_retention = compute_true_retention(logs_df)

    return ReviewSummary(
        total_reviews=len(logs_df),
        cards_reviewed=int(logs_df["card_id"].nunique()) if not logs_df.empty else 0,
        review_state_reviews=int((logs_df["state_before"] == CardStatus.REVIEW.value).sum()),
        true_retention=true_retention,
        desired_retention=desired_retention,
        retention_gap=None if true_retention is None else true_retention - desired_retention,
        grade_counts=compute_grade_counts(logs_df),
        daily_reviews=compute_daily_reviews(logs_df, day_index),
    )


def build_stored_summary(desired_retention: float, card_id: Optional[int] = None) -> ReviewSummary:
    """Summary over the review logs in the store."""
    return build_review_summary(database.get_review_logs(card_id), desired_retention)
