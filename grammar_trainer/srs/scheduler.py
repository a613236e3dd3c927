"""Session scheduler: picks the cards of one practice session.

Selection runs three passes over the (optionally unit-filtered) catalog:

1. due       - answered cards whose due date has passed, most overdue first
2. new       - never-answered cards, easiest first, at most NEW_CARD_CAP
3. near_due  - answered cards not yet due, soonest first, as filler

Each pass only draws from cards the previous passes did not take.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from grammar_trainer.errors import InvalidInputError
from grammar_trainer.models.card import Card
from grammar_trainer.models.progress import CardState
from grammar_trainer.models.session import SessionCard

from .time import parse_iso_z


MIN_SESSION_SIZE = 10
MAX_SESSION_SIZE = 20
DEFAULT_SESSION_SIZE = 10

# New cards introduced per session
NEW_CARD_CAP = 5

# Onboarding warm-up size; chosen internally, so never clamped
WARMUP_SESSION_SIZE = 5


def clamp_session_size(size: int | None) -> int:
    """Clamp a caller-requested session size into [MIN_SESSION_SIZE, MAX_SESSION_SIZE]."""
    if size is None:
        return DEFAULT_SESSION_SIZE
    return min(MAX_SESSION_SIZE, max(MIN_SESSION_SIZE, int(size)))


def _by_due_date(entry: tuple[Card, CardState]) -> tuple[datetime, str]:
    card, state = entry
    return parse_iso_z(state.due_date), card.id


def build_session(
    cards: Iterable[Card],
    card_states: Mapping[str, CardState],
    requested_size: int,
    now: datetime,
    unit_id: str | None = None,
) -> list[SessionCard]:
    """Build the ordered card queue for one session.

    Args:
        cards: The full catalog
        card_states: The user's card states keyed by card id
        requested_size: Maximum number of cards to return (already clamped if untrusted)
        now: Instant the session starts at
        unit_id: Optional unit to restrict the session to

    Returns:
        Up to ``requested_size`` cards in due, new, near_due order. An empty
        list means there is nothing to practice.

    Raises:
        InvalidInputError: If ``unit_id`` names no unit of the catalog
        ValueError: If ``requested_size`` is negative
    """
    if requested_size < 0:
        raise ValueError(f"requested_size must be >= 0, got {requested_size}")

    cards = list(cards)
    if unit_id is not None and not any(card.unit_id == unit_id for card in cards):
        raise InvalidInputError(f"Unknown unit: {unit_id}")

    due: list[tuple[Card, CardState]] = []
    unseen: list[Card] = []
    near_due: list[tuple[Card, CardState]] = []

    seen_ids: set[str] = set()
    for card in cards:
        if card.id in seen_ids:
            continue
        seen_ids.add(card.id)
        if unit_id is not None and card.unit_id != unit_id:
            continue

        state = card_states.get(card.id)
        if state is None:
            unseen.append(card)
        elif parse_iso_z(state.due_date) <= now:
            due.append((card, state))
        else:
            near_due.append((card, state))

    due.sort(key=_by_due_date)
    unseen.sort(key=lambda card: (card.difficulty, card.id))
    near_due.sort(key=_by_due_date)

    selected = [SessionCard.from_card(card, "due", state) for card, state in due[:requested_size]]

    new_limit = min(NEW_CARD_CAP, requested_size - len(selected))
    selected.extend(SessionCard.from_card(card, "new") for card in unseen[:new_limit])

    remaining = requested_size - len(selected)
    selected.extend(
        SessionCard.from_card(card, "near_due", state) for card, state in near_due[:remaining]
    )
    return selected
