"""Per-user progress records: card mastery state, daily scores, review log."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, Field

from grammar_trainer.srs.time import utc_now_iso


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class CardState(BaseModel):
    """Leitner state of one card for one user.

    Exists only once the user has answered the card at least once.
    """

    card_id: str = Field(..., description="Card this state belongs to")
    box: int = Field(..., ge=1, le=4, description="Leitner box (1-4)")
    due_date: str = Field(..., description="Next review instant (UTC ISO Z)")
    correct_streak: int = Field(0, ge=0, description="Consecutive correct answers")
    total_attempts: int = Field(0, ge=0, description="Answers ever submitted for this card")
    last_seen_at: str = Field(default_factory=utc_now_iso, description="Last answer instant (UTC ISO Z)")


class DailyScore(BaseModel):
    """Points and answer count for one user on one UTC day."""

    date: str = Field(..., description="UTC calendar day (YYYY-MM-DD)")
    points: int = Field(0, ge=0)
    answers_count: int = Field(0, ge=0)


class ReviewRecord(BaseModel):
    """Append-only log entry written for every graded answer."""

    id: str = Field(default_factory=generate_uuid)
    user_id: str
    card_id: str
    timestamp: str = Field(default_factory=utc_now_iso)
    correct: bool
    choice: str
    response_ms: int = Field(0, ge=0)
