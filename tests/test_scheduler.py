"""Unit tests for the session scheduler."""

import pytest

from grammar_trainer.errors import InvalidInputError
from grammar_trainer.srs.scheduler import (
    DEFAULT_SESSION_SIZE,
    MAX_SESSION_SIZE,
    MIN_SESSION_SIZE,
    build_session,
    clamp_session_size,
)


class TestClampSessionSize:
    def test_missing_size_defaults(self):
        assert clamp_session_size(None) == DEFAULT_SESSION_SIZE

    @pytest.mark.parametrize("size,expected", [(3, 10), (-1, 10), (15, 15), (50, 20)])
    def test_clamps_into_range(self, size, expected):
        assert clamp_session_size(size) == expected
        assert MIN_SESSION_SIZE <= clamp_session_size(size) <= MAX_SESSION_SIZE


def _catalog(make_card, count, unit_id="unit-1", prefix="q", difficulty=1):
    return [
        make_card(prompt=f"{prefix} {i}", unit_id=unit_id, difficulty=difficulty, card_id=f"{prefix}-{i:02d}")
        for i in range(count)
    ]


class TestBuildSession:
    def test_due_then_new_then_near_due(self, make_card, make_state, now):
        due_cards = _catalog(make_card, 3, prefix="due")
        new_cards = _catalog(make_card, 2, prefix="new")
        later_cards = _catalog(make_card, 8, prefix="later")
        states = {c.id: make_state(c.id, due_date="2025-12-12T00:00:00Z") for c in due_cards}
        states.update({c.id: make_state(c.id, box=2, due_date="2025-12-20T00:00:00Z") for c in later_cards})

        session = build_session(due_cards + new_cards + later_cards, states, 10, now)

        assert [c.source for c in session] == ["due"] * 3 + ["new"] * 2 + ["near_due"] * 5
        assert len(session) == 10

    def test_due_cards_ordered_by_due_date_then_id(self, make_card, make_state, now):
        cards = _catalog(make_card, 3)
        states = {
            "q-00": make_state("q-00", due_date="2025-12-12T00:00:00Z"),
            "q-01": make_state("q-01", due_date="2025-12-10T00:00:00Z"),
            "q-02": make_state("q-02", due_date="2025-12-12T00:00:00Z"),
        }

        session = build_session(cards, states, 10, now)

        assert [c.id for c in session] == ["q-01", "q-00", "q-02"]

    def test_near_due_cards_soonest_first(self, make_card, make_state, now):
        cards = _catalog(make_card, 4)
        states = {
            "q-00": make_state("q-00", box=3, due_date="2025-12-20T00:00:00Z"),
            "q-01": make_state("q-01", box=2, due_date="2025-12-15T00:00:00Z"),
            "q-02": make_state("q-02", box=2, due_date="2025-12-17T00:00:00Z"),
            "q-03": make_state("q-03", box=2, due_date="2025-12-15T00:00:00Z"),
        }

        session = build_session(cards, states, 10, now)

        assert [c.id for c in session] == ["q-01", "q-03", "q-02", "q-00"]
        assert {c.source for c in session} == {"near_due"}

    def test_due_exactly_now_counts_as_due(self, make_card, make_state, now):
        cards = _catalog(make_card, 1)
        states = {"q-00": make_state("q-00", due_date="2025-12-13T09:30:00Z")}

        session = build_session(cards, states, 10, now)

        assert session[0].source == "due"

    def test_new_cards_capped_at_five(self, make_card, now):
        cards = _catalog(make_card, 12)

        session = build_session(cards, {}, 10, now)

        assert len(session) == 5
        assert all(c.source == "new" for c in session)

    def test_new_cards_easiest_first(self, make_card, now):
        hard = make_card(prompt="hard", difficulty=3, card_id="a-hard")
        easy = make_card(prompt="easy", difficulty=1, card_id="z-easy")

        session = build_session([hard, easy], {}, 10, now)

        assert [c.id for c in session] == ["z-easy", "a-hard"]

    def test_due_cards_fill_session_before_new(self, make_card, make_state, now):
        due_cards = _catalog(make_card, 12, prefix="due")
        states = {c.id: make_state(c.id, due_date="2025-12-01T00:00:00Z") for c in due_cards}
        new_cards = _catalog(make_card, 3, prefix="new")

        session = build_session(due_cards + new_cards, states, 10, now)

        assert len(session) == 10
        assert all(c.source == "due" for c in session)

    def test_unit_filter(self, make_card, now):
        cards = _catalog(make_card, 3, unit_id="unit-1", prefix="one") + _catalog(
            make_card, 3, unit_id="unit-2", prefix="two"
        )

        session = build_session(cards, {}, 10, now, unit_id="unit-2")

        assert {c.unit_id for c in session} == {"unit-2"}
        assert len(session) == 3

    def test_unknown_unit_is_invalid_input(self, make_card, now):
        with pytest.raises(InvalidInputError):
            build_session(_catalog(make_card, 2), {}, 10, now, unit_id="unit-9")

    def test_empty_catalog_gives_empty_session(self, now):
        assert build_session([], {}, 10, now) == []

    def test_duplicate_cards_selected_once(self, make_card, now):
        card = make_card()

        session = build_session([card, card], {}, 10, now)

        assert len(session) == 1

    def test_warmup_size_is_not_clamped(self, make_card, make_state, now):
        cards = _catalog(make_card, 10)
        states = {c.id: make_state(c.id, due_date="2025-12-01T00:00:00Z") for c in cards}

        assert len(build_session(cards, states, 5, now)) == 5

    def test_session_cards_hide_answer_and_carry_state(self, make_card, make_state, now):
        card = make_card()
        states = {card.id: make_state(card.id, box=3, due_date="2025-12-01T00:00:00Z")}

        session_card = build_session([card], states, 10, now)[0]

        assert "correct_choice" not in session_card.model_dump()
        assert session_card.current_box == 3
        assert session_card.due_date == "2025-12-01T00:00:00Z"

    def test_negative_size_rejected(self, now):
        with pytest.raises(ValueError):
            build_session([], {}, -1, now)
