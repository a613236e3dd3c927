"""In-memory practice session state."""

from .practice_store import (
    AnswerHistoryItem,
    PracticeSession,
    PracticeSessionStore,
    get_practice_store,
    reset_practice_store,
)

__all__ = [
    "AnswerHistoryItem",
    "PracticeSession",
    "PracticeSessionStore",
    "get_practice_store",
    "reset_practice_store",
]
