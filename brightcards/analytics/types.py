"""
Types for review analytics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class ReviewSummary:
    """
    Aggregate view of a review log.

    true_retention counts only reviews of cards already in REVIEW state;
    ladder steps say little about long-term memory.
    """
    total_reviews: int
    cards_reviewed: int
    review_state_reviews: int
    true_retention: Optional[float]
    desired_retention: float
    retention_gap: Optional[float]
    grade_counts: dict[str, int]
    daily_reviews: pd.Series
