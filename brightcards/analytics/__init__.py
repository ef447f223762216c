"""
Analytics package exports.
"""

from brightcards.analytics.service import build_review_summary, build_stored_summary
from brightcards.analytics.types import ReviewSummary

__all__ = [
    "build_review_summary",
    "build_stored_summary",
    "ReviewSummary",
]
