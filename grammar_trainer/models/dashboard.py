"""Models for the progress dashboard."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


MasteryModelName = Literal["card_count", "subtopic_coverage"]


class UnitMastery(BaseModel):
    """Mastery of one unit under the configured mastery model."""

    unit_id: str
    total_cards: int = Field(..., ge=0)
    seen_cards: int = Field(..., ge=0)
    mastered_cards: int = Field(..., ge=0, description="Cards at box 4")
    total_subtopics: int = Field(..., ge=0)
    mastered_subtopics: int = Field(..., ge=0)
    mastery_ratio: float = Field(..., ge=0, le=1)
    completed: bool


class DashboardData(BaseModel):
    """Response for GET /api/dashboard."""

    due_count: int
    daily_points: int
    answers_today: int
    daily_answer_cap: int
    mastery_model: MasteryModelName
    unit_mastery: list[UnitMastery]
