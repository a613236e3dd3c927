"""Repositories module for data access layer."""

from .card_repository import (
    CardRepository,
    CardNotFoundError,
    get_card_repository,
)
from .progress_repository import (
    AnswerSnapshot,
    ProgressRepository,
    get_progress_repository,
)
from .user_repository import (
    UserRepository,
    UserNotFoundError,
    get_user_repository,
    hash_room_code,
)

__all__ = [
    "CardRepository",
    "CardNotFoundError",
    "get_card_repository",
    "AnswerSnapshot",
    "ProgressRepository",
    "get_progress_repository",
    "UserRepository",
    "UserNotFoundError",
    "get_user_repository",
    "hash_room_code",
]
