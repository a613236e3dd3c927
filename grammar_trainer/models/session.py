"""Models for practice session endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from grammar_trainer.models.card import Card, CardBase
from grammar_trainer.models.progress import CardState


CardSource = Literal["due", "new", "near_due"]


class SessionCard(CardBase):
    """A card selected for a session, without its answer.

    ``current_box`` and ``due_date`` describe the user's state at selection
    time and are null for cards the user has never seen.
    """

    source: CardSource
    current_box: int | None = None
    due_date: str | None = None

    @classmethod
    def from_card(cls, card: Card, source: CardSource, state: CardState | None = None) -> "SessionCard":
        return cls(
            **card.model_dump(exclude={"correct_choice"}),
            source=source,
            current_box=state.box if state is not None else None,
            due_date=state.due_date if state is not None else None,
        )


class SessionStartRequest(BaseModel):
    """Request for POST /api/session/start."""

    unit_id: str | None = Field(None, description="Restrict the session to one unit")
    size: int | None = Field(None, description="Requested card count (clamped to 10-20)")


class SessionCounts(BaseModel):
    due: int = 0
    new: int = 0
    near_due: int = 0


class SessionStartResponse(BaseModel):
    """Response for POST /api/session/start and /api/session/warmup."""

    session_id: str | None = Field(None, description="Active practice session, null when empty")
    session_size: int
    unit_id: str | None = None
    counts: SessionCounts
    cards: list[SessionCard]
    message: str | None = Field(None, description="Set when there is nothing to practice")


class AnswerRequest(BaseModel):
    """Request for POST /api/session/answer."""

    card_id: str = Field(..., min_length=1)
    choice: str = Field(..., min_length=1, max_length=8)
    response_ms: float = Field(0, ge=0, description="Time the learner took to answer")


class AnswerResult(BaseModel):
    """Outcome of grading one answer."""

    card_id: str
    is_new_card: bool
    correct: bool
    correct_choice: str
    explanation: str
    new_box: int
    due_date: str
    requeue_in_session: bool
    points_awarded: int
    daily_points: int
    answers_today: int


class AnswerResponse(AnswerResult):
    """AnswerResult plus the state of the caller's practice session."""

    remaining_in_session: int | None = Field(
        None, description="Cards left in the active session, null when the card was not part of one"
    )


class WeakSubtopic(BaseModel):
    key: str = Field(..., description="'unit :: subtopic'")
    misses: int


class SessionSummary(BaseModel):
    """Response for GET /api/session/summary."""

    session_id: str
    answered: int
    correct: int
    points: int
    remaining: int
    complete: bool
    weak_subtopics: list[WeakSubtopic]
