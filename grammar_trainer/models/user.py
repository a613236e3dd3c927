"""Room membership and login models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from grammar_trainer.srs.time import utc_now_iso


def normalize_room_code(value: str) -> str:
    return value.strip().upper()


def normalize_display_name(value: str) -> str:
    return value.strip()


class LoginRequest(BaseModel):
    """Request for POST /api/login.

    Room codes are case-insensitive; display names keep their casing but are
    matched case-insensitively within a room.
    """

    room_code: str = Field(..., description="Shared code of the room to join (4-32 chars)")
    display_name: str = Field(..., description="Name shown on the leaderboard (2-32 chars)")

    @field_validator("room_code")
    @classmethod
    def _check_room_code(cls, value: str) -> str:
        value = normalize_room_code(value)
        if not 4 <= len(value) <= 32:
            raise ValueError("room_code must be 4-32 characters.")
        return value

    @field_validator("display_name")
    @classmethod
    def _check_display_name(cls, value: str) -> str:
        value = normalize_display_name(value)
        if not 2 <= len(value) <= 32:
            raise ValueError("display_name must be 2-32 characters.")
        return value


class User(BaseModel):
    """A learner, scoped to exactly one room."""

    id: str
    display_name: str
    room_id: str
    created_at: str = Field(default_factory=utc_now_iso)


class LoginResponse(BaseModel):
    ok: bool = True
    user_id: str
    display_name: str
    room_id: str
