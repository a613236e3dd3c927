"""Dashboard API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from grammar_trainer.auth import CurrentUser, get_current_user
from grammar_trainer.config import get_trainer_settings
from grammar_trainer.errors import StoreUnavailableError
from grammar_trainer.models import DashboardData
from grammar_trainer.repositories import get_card_repository, get_progress_repository
from grammar_trainer.srs.mastery import compute_dashboard
from grammar_trainer.srs.time import utc_date_key, utc_now

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardData)
async def get_dashboard(user: Annotated[CurrentUser, Depends(get_current_user)]) -> DashboardData:
    """Due count, today's score and per-unit mastery for the caller."""
    now = utc_now()
    progress_repo = get_progress_repository()
    try:
        cards = get_card_repository().list_cards()
        states = progress_repo.get_card_states(user.user_id)
        todays_score = progress_repo.get_daily_score(user.user_id, utc_date_key(now))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    model = get_trainer_settings().build_mastery_model()
    return compute_dashboard(cards, states, todays_score, model, now)
