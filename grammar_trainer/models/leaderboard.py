"""Models for the room leaderboard."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


LeaderboardRange = Literal["today", "week", "all"]


class LeaderboardRow(BaseModel):
    display_name: str
    points: int = Field(..., ge=0, description="Points over the requested range")
    mastered: int = Field(..., ge=0, description="Cards at box 4, all-time")
    streak: int = Field(..., ge=0, description="Consecutive point-earning days ending today")


class LeaderboardResponse(BaseModel):
    """Response for GET /api/leaderboard."""

    range: LeaderboardRange
    rows: list[LeaderboardRow]
