"""
Metric computations over review logs.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Iterable, Optional

import pandas as pd

from brightcards.fsrs.constants import CardStatus, Grade
from brightcards.fsrs.memory_state import ReviewLog


LOG_COLUMNS = [
    "card_id",
    "grade",
    "review_time",
    "state_before",
    "state_after",
    "elapsed_days",
    "retrievability",
    "stability_before",
    "difficulty_before",
    "stability_after",
    "difficulty_after",
    "scheduled_days",
    "due",
]


def logs_to_frame(logs: Iterable[ReviewLog]) -> pd.DataFrame:
    """
    One row per review, with grade as int, states as their string values
    and a UTC day column.
    """
    rows = []
    for log in logs:
        row = asdict(log)
        row["grade"] = int(log.grade)
        row["state_before"] = log.state_before.value
        row["state_after"] = log.state_after.value
        rows.append(row)

    df = pd.DataFrame(rows, columns=LOG_COLUMNS)
    if df.empty:
        df["day_utc"] = pd.Series(dtype="datetime64[ns, UTC]")
        return df

    df["review_time"] = pd.to_datetime(df["review_time"], utc=True)
    df["day_utc"] = df["review_time"].dt.floor("D")
    return df


def build_day_index(logs_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the review range.
    """
    if logs_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    return pd.date_range(
        start=logs_df["day_utc"].min(),
        end=logs_df["day_utc"].max(),
        freq="D",
    )


def compute_true_retention(logs_df: pd.DataFrame) -> Optional[float]:
    """
    Share of REVIEW-state reviews that were not graded AGAIN.

    Returns:
        Retention in [0, 1], or None if there are no REVIEW-state reviews
    """
    if logs_df.empty:
        return None
    scoped = logs_df[logs_df["state_before"] == CardStatus.REVIEW.value]
    if scoped.empty:
        return None
    return float((scoped["grade"] != int(Grade.AGAIN)).mean())


def compute_grade_counts(logs_df: pd.DataFrame) -> dict[str, int]:
    """Number of reviews per grade name, every grade present."""
    counts = {grade.name: 0 for grade in Grade}
    if logs_df.empty:
        return counts
    for value, count in logs_df["grade"].value_counts().items():
        counts[Grade(int(value)).name] = int(count)
    return counts


def compute_daily_reviews(logs_df: pd.DataFrame, day_index: pd.DatetimeIndex) -> pd.Series:
    """
    Reviews per UTC day, zero-filled over the day index.
    """
    if logs_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")
    daily = logs_df.groupby("day_utc").size()
    return daily.reindex(day_index, fill_value=0).astype("int64")
