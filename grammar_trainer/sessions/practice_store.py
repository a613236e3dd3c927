"""TTL-based store for the active practice session of each user."""

from __future__ import annotations

import threading
import uuid
from collections import Counter
from dataclasses import dataclass, field

from cachetools import TTLCache

from grammar_trainer.models import SessionCard, SessionSummary, WeakSubtopic
from grammar_trainer.srs.time import utc_now_iso

WEAK_SUBTOPIC_LIMIT = 3


@dataclass(frozen=True)
class AnswerHistoryItem:
    """One graded answer given inside a practice session."""

    card_id: str
    unit_id: str
    subtopic: str
    correct: bool
    points: int

    @property
    def subtopic_key(self) -> str:
        return f"{self.unit_id} :: {self.subtopic}"


@dataclass
class PracticeSession:
    """The queue and answer history of one practice session.

    Attributes:
        session_id: Deterministic id per (user_id, created_at)
        created_at: ISO timestamp when the session was started
        queue: Cards still to answer, head first. Missed cards go to the back.
        history: Answers recorded so far, oldest first
    """

    session_id: str
    created_at: str
    queue: list[SessionCard] = field(default_factory=list)
    history: list[AnswerHistoryItem] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return len(self.queue)

    @property
    def is_complete(self) -> bool:
        return not self.queue

    def _queue_index(self, card_id: str) -> int | None:
        for index, card in enumerate(self.queue):
            if card.id == card_id:
                return index
        return None

    def record_answer(self, card_id: str, correct: bool, points: int) -> bool:
        """Advance the queue past an answered card.

        The first queued occurrence of the card is removed, and a missed card
        is appended to the end so it comes back before the session ends.

        Returns:
            False when the card is not queued; the session is left untouched.
        """
        index = self._queue_index(card_id)
        if index is None:
            return False

        card = self.queue.pop(index)
        if not correct:
            self.queue.append(card)
        self.history.append(
            AnswerHistoryItem(
                card_id=card_id,
                unit_id=card.unit_id,
                subtopic=card.subtopic,
                correct=correct,
                points=points,
            )
        )
        return True

    def weak_subtopics(self, limit: int = WEAK_SUBTOPIC_LIMIT) -> list[WeakSubtopic]:
        """Subtopics with the most misses, ties broken by key."""
        misses = Counter(item.subtopic_key for item in self.history if not item.correct)
        ranked = sorted(misses.items(), key=lambda entry: (-entry[1], entry[0]))
        return [WeakSubtopic(key=key, misses=count) for key, count in ranked[:limit]]

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            answered=len(self.history),
            correct=sum(1 for item in self.history if item.correct),
            points=sum(item.points for item in self.history),
            remaining=self.remaining,
            complete=self.is_complete,
            weak_subtopics=self.weak_subtopics(),
        )


def _generate_session_id(user_id: str, created_at: str) -> str:
    """Generate a deterministic session ID from the user and start time."""
    namespace = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")
    return str(uuid.uuid5(namespace, f"{user_id}:{created_at}"))


class PracticeSessionStore:
    """Thread-safe TTL-based practice session store.

    Holds one PracticeSession per user. Sessions expire after TTL seconds of
    inactivity (sliding window); an expired session simply ends, progress
    already written to the store is unaffected.
    """

    # Default TTL: 2 hours
    DEFAULT_TTL_SECONDS = 2 * 60 * 60
    # Max sessions to cache
    MAX_SESSIONS = 10000

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, maxsize: int = MAX_SESSIONS):
        self._cache: TTLCache[str, PracticeSession] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def start(self, user_id: str, cards: list[SessionCard]) -> PracticeSession:
        """Start a new session for the user, replacing any previous one."""
        created_at = utc_now_iso()
        session = PracticeSession(
            session_id=_generate_session_id(user_id, created_at),
            created_at=created_at,
            queue=list(cards),
        )
        with self._lock:
            self._cache[user_id] = session
        return session

    def get(self, user_id: str) -> PracticeSession | None:
        """Get the user's session, refreshing its TTL. None if absent or expired."""
        with self._lock:
            session = self._cache.get(user_id)
            if session is not None:
                self._cache[user_id] = session
            return session

    def record_answer(self, user_id: str, card_id: str, correct: bool, points: int) -> PracticeSession | None:
        """Record an answer in the user's session.

        Returns:
            The session if the card was part of it, otherwise None
        """
        with self._lock:
            session = self._cache.get(user_id)
            if session is None or not session.record_answer(card_id, correct, points):
                return None
            self._cache[user_id] = session
            return session

    def reset(self, user_id: str) -> None:
        """Remove the user's session."""
        with self._lock:
            self._cache.pop(user_id, None)

    def clear(self) -> None:
        """Clear all sessions (for testing)."""
        with self._lock:
            self._cache.clear()


# Singleton instance
_practice_store: PracticeSessionStore | None = None


def get_practice_store() -> PracticeSessionStore:
    """Get the singleton practice session store instance."""
    global _practice_store
    if _practice_store is None:
        _practice_store = PracticeSessionStore()
    return _practice_store


def reset_practice_store() -> None:
    """Reset the practice session store (for testing)."""
    global _practice_store
    _practice_store = None
