"""Spaced-repetition core: Leitner boxes, scheduling, grading, ranking.

Only the dependency-free helpers are re-exported here; the scheduler,
grader, mastery and leaderboard modules import the pydantic models and are
imported by their full path.
"""

from .leitner import LEITNER_INTERVAL_DAYS, MAX_BOX, MIN_BOX, due_date_for_box, next_box
from .time import (
    utc_now,
    utc_now_iso,
    utc_datetime_to_iso_z,
    parse_iso_z,
    add_days_iso,
    utc_date_key,
    shift_date_key,
)

__all__ = [
    "LEITNER_INTERVAL_DAYS",
    "MAX_BOX",
    "MIN_BOX",
    "due_date_for_box",
    "next_box",
    "utc_now",
    "utc_now_iso",
    "utc_datetime_to_iso_z",
    "parse_iso_z",
    "add_days_iso",
    "utc_date_key",
    "shift_date_key",
]
