"""Pytest configuration and fixtures."""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

# Ensure auth is disabled during tests by default
os.environ.setdefault("AUTH_ENABLED", "false")

from grammar_trainer.catalog import make_card_id
from grammar_trainer.errors import ProgressConflictError
from grammar_trainer.models import Card, CardState, DailyScore, ReviewRecord, User
from grammar_trainer.repositories import AnswerSnapshot, CardNotFoundError
from grammar_trainer.sessions import reset_practice_store

TEST_SECRET = "test-session-secret-0123456789"

# Fixed grading instant used across tests
NOW = datetime(2025, 12, 13, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def auth_disabled_env(monkeypatch):
    """Fixture that ensures AUTH_ENABLED is false."""
    monkeypatch.setenv("AUTH_ENABLED", "false")


@pytest.fixture
def auth_enabled_env(monkeypatch):
    """Fixture that enables auth with a test signing secret."""
    monkeypatch.setenv("AUTH_ENABLED", "true")
    monkeypatch.setenv("SESSION_SECRET", TEST_SECRET)


@pytest.fixture(autouse=True)
def fresh_practice_store():
    """Give every test an empty practice session store."""
    reset_practice_store()
    yield
    reset_practice_store()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_card():
    """Factory for valid catalog cards."""

    def _make(
        prompt: str = "The list of items ___ on the desk.",
        unit_id: str = "unit-1",
        subtopic: str = "agreement",
        correct_choice: str = "B",
        difficulty: int = 1,
        card_id: str | None = None,
    ) -> Card:
        return Card(
            id=card_id or make_card_id(unit_id, subtopic, prompt),
            unit_id=unit_id,
            subtopic=subtopic,
            prompt=prompt,
            choices={"A": "are", "B": "is", "C": "were", "D": "be"},
            correct_choice=correct_choice,
            explanation="The subject is singular.",
            difficulty=difficulty,
        )

    return _make


@pytest.fixture
def make_state():
    """Factory for card states."""

    def _make(
        card_id: str,
        box: int = 1,
        due_date: str = "2025-12-13T00:00:00Z",
        correct_streak: int = 0,
        total_attempts: int = 1,
    ) -> CardState:
        return CardState(
            card_id=card_id,
            box=box,
            due_date=due_date,
            correct_streak=correct_streak,
            total_attempts=total_attempts,
            last_seen_at="2025-12-01T00:00:00Z",
        )

    return _make


@pytest.fixture
def make_score():
    """Factory for daily scores."""

    def _make(date: str = "2025-12-13", points: int = 0, answers_count: int = 0) -> DailyScore:
        return DailyScore(date=date, points=points, answers_count=answers_count)

    return _make


@dataclass
class StubCardRepo:
    cards: list[Card] = field(default_factory=list)

    def list_cards(self) -> list[Card]:
        return sorted(self.cards, key=lambda card: card.id)

    def get_by_id(self, card_id: str) -> Card:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    def count_by_unit(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for card in self.list_cards():
            counts[card.unit_id] = counts.get(card.unit_id, 0) + 1
        return dict(sorted(counts.items()))

    def upsert_many(self, cards) -> int:
        by_id = {card.id: card for card in self.cards}
        cards = list(cards)
        by_id.update({card.id: card for card in cards})
        self.cards = list(by_id.values())
        return len(cards)


@dataclass
class StubProgressRepo:
    states: dict[str, dict[str, CardState]] = field(default_factory=dict)
    scores: dict[str, dict[str, DailyScore]] = field(default_factory=dict)
    reviews: list[ReviewRecord] = field(default_factory=list)
    # apply_answer calls that should lose a concurrent-update race
    conflicts: int = 0
    apply_calls: int = 0

    def get_card_states(self, user_id: str) -> dict[str, CardState]:
        return dict(self.states.get(user_id, {}))

    def get_daily_score(self, user_id: str, date: str) -> DailyScore | None:
        return self.scores.get(user_id, {}).get(date)

    def list_daily_scores(self, user_id: str) -> list[DailyScore]:
        return sorted(self.scores.get(user_id, {}).values(), key=lambda score: score.date)

    def get_answer_snapshot(self, user_id: str, card_id: str, date: str) -> AnswerSnapshot:
        return AnswerSnapshot(
            card_state=self.states.get(user_id, {}).get(card_id),
            daily_score=self.get_daily_score(user_id, date),
        )

    def apply_answer(self, user_id, snapshot, graded, review) -> None:
        self.apply_calls += 1
        if self.conflicts:
            self.conflicts -= 1
            raise ProgressConflictError("lost race")
        self.states.setdefault(user_id, {})[graded.card_state.card_id] = graded.card_state
        self.scores.setdefault(user_id, {})[graded.daily_score.date] = graded.daily_score
        self.reviews.append(review)


@dataclass
class StubUserRepo:
    rooms: dict[str, str] = field(default_factory=dict)
    users: list[User] = field(default_factory=list)

    def get_or_create_room(self, room_code_hash: str) -> str:
        return self.rooms.setdefault(room_code_hash, f"room-{len(self.rooms) + 1}")

    def get_or_create_user(self, room_id: str, display_name: str) -> User:
        for user in self.users:
            if user.room_id == room_id and user.display_name.lower() == display_name.lower():
                return user
        user = User(id=f"user-{len(self.users) + 1}", display_name=display_name, room_id=room_id)
        self.users.append(user)
        return user

    def list_by_room(self, room_id: str) -> list[User]:
        return [user for user in self.users if user.room_id == room_id]


@dataclass
class StubRepos:
    cards: StubCardRepo
    progress: StubProgressRepo
    users: StubUserRepo


@pytest.fixture
def stub_repos(monkeypatch):
    """Swap every router's repositories for in-memory stubs and freeze the clock."""
    from grammar_trainer.routers import auth, cards, dashboard, leaderboard, seed, session

    repos = StubRepos(cards=StubCardRepo(), progress=StubProgressRepo(), users=StubUserRepo())

    for module in (cards, dashboard, seed, session):
        monkeypatch.setattr(module, "get_card_repository", lambda: repos.cards)
    for module in (dashboard, leaderboard, session):
        monkeypatch.setattr(module, "get_progress_repository", lambda: repos.progress)
        monkeypatch.setattr(module, "utc_now", lambda: NOW)
    for module in (auth, leaderboard):
        monkeypatch.setattr(module, "get_user_repository", lambda: repos.users)

    return repos


@pytest.fixture
def client():
    from grammar_trainer.main import app

    return TestClient(app)


# Dev-mode identity headers for a member of room-1
ALICE = {"X-User-Id": "user-alice", "X-Room-Id": "room-1", "X-Display-Name": "Alice"}


@pytest.fixture
def alice_headers():
    return dict(ALICE)
