"""
FSRS Constants and Parameters

All fixed constants for the scheduling engine in one place.
Tunable values (weights, retention, ladder steps) live in the ParameterSet;
the values here are the defaults it falls back to.
"""

from datetime import timedelta
from enum import Enum, IntEnum


# ---- Grades ----

class Grade(IntEnum):
    """Reviewer's self-reported recall quality. Values feed the formulas."""
    AGAIN = 1   # Forgot
    HARD = 2    # Recalled with serious difficulty
    GOOD = 3    # Recalled with normal effort
    EASY = 4    # Recalled effortlessly


# Names accepted from the host application. "normal" is the label the
# review screen used for GOOD.
GRADE_ALIASES = {
    "again": Grade.AGAIN,
    "hard": Grade.HARD,
    "good": Grade.GOOD,
    "normal": Grade.GOOD,
    "easy": Grade.EASY,
}


# ---- Card states ----

class CardStatus(str, Enum):
    """Scheduling state of a card."""
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


# ---- Forgetting curve ----
# R(t, S) = (1 + FACTOR * t / S) ** DECAY, chosen so that R(S, S) = 0.9

DECAY = -0.5
FACTOR = 0.9 ** (1 / DECAY) - 1  # 19/81


# ---- Global bounds ----

S_MIN = 0.01            # Floor for any finite stability (days)
S0_MIN = 0.1            # Floor for initial stability (days)
D_MIN = 1.0
D_MAX = 10.0
FUZZ_MIN_INTERVAL = 2.5  # Intervals shorter than this (days) are never fuzzed
SAME_DAY = 1.0           # Ladder steps closer than this (days) keep stability


# ---- Default weights (17 slots) ----
# w0-w3   initial stability per grade
# w4, w5  initial difficulty
# w6      difficulty delta per grade
# w7      mean reversion toward D0(EASY)
# w8-w10  stability after success
# w11-w14 stability after failure
# w15     HARD penalty, w16 EASY bonus

DEFAULT_WEIGHTS = (
    0.40255, 1.18385, 3.173, 15.69105,
    7.1949, 0.5345,
    1.4604,
    0.0046,
    1.54575, 0.1192, 1.01925,
    1.9395, 0.11, 0.29605, 2.2698,
    0.2315, 2.9898,
)

WEIGHT_COUNT = len(DEFAULT_WEIGHTS)

# Accepted range for each weight slot; a parameter set outside these
# bounds is rejected before any card is scheduled with it. The HARD
# penalty w15 stays below 1 so HARD always grows stability less than GOOD.
WEIGHT_BOUNDS = (
    (0.01, 100.0), (0.01, 100.0), (0.01, 100.0), (0.01, 100.0),
    (1.0, 10.0), (0.001, 4.0),
    (0.001, 4.0),
    (0.001, 0.75),
    (0.0, 4.5), (0.0, 0.8), (0.001, 3.5),
    (0.001, 5.0), (0.001, 0.25), (0.001, 0.9), (0.0, 4.0),
    (0.0, 0.99), (1.0, 6.0),
)


# ---- Scheduling defaults ----

DEFAULT_DESIRED_RETENTION = 0.9
DEFAULT_MINIMUM_INTERVAL = 1.0      # days
DEFAULT_MAXIMUM_INTERVAL = 36500.0  # days

# Hard ceiling for any configured interval or ladder step (100 years);
# keeps due dates inside the datetime range.
MAXIMUM_INTERVAL_LIMIT = 36500.0    # days
DEFAULT_FUZZ_FACTOR = 0.05

DEFAULT_LEARNING_STEPS = (timedelta(minutes=1), timedelta(minutes=10))
DEFAULT_RELEARNING_STEPS = (timedelta(minutes=10),)


# ---- Difficulty labels ----
# Upper bounds (exclusive) for the user-facing label derived from D

DIFFICULTY_LABELS = (
    (4.0, "Easy"),
    (7.0, "Medium"),
)
DIFFICULTY_LABEL_MAX = "Hard"
