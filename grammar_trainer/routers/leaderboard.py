"""Leaderboard API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from grammar_trainer.auth import CurrentUser, get_current_user
from grammar_trainer.errors import StoreUnavailableError
from grammar_trainer.models import LeaderboardRange, LeaderboardResponse
from grammar_trainer.repositories import get_progress_repository, get_user_repository
from grammar_trainer.srs.leaderboard import RoomMember, rank_leaderboard
from grammar_trainer.srs.time import utc_date_key, utc_now

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    range_: Annotated[LeaderboardRange, Query(alias="range")] = "today",
) -> LeaderboardResponse:
    """Rank the members of the caller's room."""
    progress_repo = get_progress_repository()
    try:
        users = get_user_repository().list_by_room(user.room_id)
        members = [RoomMember(user_id=u.id, display_name=u.display_name) for u in users]
        daily_scores = {m.user_id: progress_repo.list_daily_scores(m.user_id) for m in members}
        card_states = {m.user_id: list(progress_repo.get_card_states(m.user_id).values()) for m in members}
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    rows = rank_leaderboard(members, range_, daily_scores, card_states, utc_date_key(utc_now()))
    return LeaderboardResponse(range=range_, rows=rows)
