"""Models module for Pydantic schemas."""

from .card import (
    CHOICE_KEYS,
    Card,
    CardBase,
    UnitSummary,
    UnitListResponse,
)
from .progress import (
    CardState,
    DailyScore,
    ReviewRecord,
)
from .session import (
    AnswerRequest,
    AnswerResponse,
    AnswerResult,
    CardSource,
    SessionCard,
    SessionCounts,
    SessionStartRequest,
    SessionStartResponse,
    SessionSummary,
    WeakSubtopic,
)
from .dashboard import (
    DashboardData,
    MasteryModelName,
    UnitMastery,
)
from .leaderboard import (
    LeaderboardRange,
    LeaderboardResponse,
    LeaderboardRow,
)
from .user import (
    LoginRequest,
    LoginResponse,
    User,
)

__all__ = [
    "CHOICE_KEYS",
    "Card",
    "CardBase",
    "UnitSummary",
    "UnitListResponse",
    "CardState",
    "DailyScore",
    "ReviewRecord",
    "AnswerRequest",
    "AnswerResponse",
    "AnswerResult",
    "CardSource",
    "SessionCard",
    "SessionCounts",
    "SessionStartRequest",
    "SessionStartResponse",
    "SessionSummary",
    "WeakSubtopic",
    "DashboardData",
    "MasteryModelName",
    "UnitMastery",
    "LeaderboardRange",
    "LeaderboardResponse",
    "LeaderboardRow",
    "LoginRequest",
    "LoginResponse",
    "User",
]
