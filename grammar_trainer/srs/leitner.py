"""Leitner box transitions.

Boxes run from 1 to 4. Box 1 is both the starting box of an unseen card and
the box every miss sends a card back to. Each box maps to a fixed review
interval, so a miss always costs all accumulated spacing.
"""

from __future__ import annotations

from datetime import datetime

from .time import add_days_iso


MIN_BOX = 1
MAX_BOX = 4

LEITNER_INTERVAL_DAYS: dict[int, int] = {
    1: 1,
    2: 3,
    3: 7,
    4: 21,
}


def next_box(prior_box: int | None, correct: bool) -> int:
    """Return the box a card moves to after an answer.

    ``prior_box`` is None for a card the user has never answered.
    """
    if not correct:
        return MIN_BOX
    base = prior_box if prior_box is not None else MIN_BOX
    return min(MAX_BOX, base + 1)


def due_date_for_box(now: datetime, box: int) -> str:
    """Return the next review instant for a card placed in ``box``."""
    if box not in LEITNER_INTERVAL_DAYS:
        raise ValueError(f"box must be between {MIN_BOX} and {MAX_BOX}, got {box}")
    return add_days_iso(now, LEITNER_INTERVAL_DAYS[box])
