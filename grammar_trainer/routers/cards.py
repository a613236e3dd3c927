"""Cards API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from grammar_trainer.auth import CurrentUser, get_current_user
from grammar_trainer.errors import StoreUnavailableError
from grammar_trainer.models import UnitListResponse, UnitSummary
from grammar_trainer.repositories import get_card_repository

router = APIRouter(prefix="/api/cards", tags=["cards"])


@router.get("/units", response_model=UnitListResponse)
async def list_units(user: Annotated[CurrentUser, Depends(get_current_user)]) -> UnitListResponse:
    """List the catalog's units with their card counts."""
    repo = get_card_repository()
    try:
        counts = repo.count_by_unit()
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    units = [UnitSummary(unit_id=unit_id, card_count=count) for unit_id, count in counts.items()]
    return UnitListResponse(units=units, count=len(units))
