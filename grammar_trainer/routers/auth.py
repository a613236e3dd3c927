"""Login API router."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from grammar_trainer.auth import (
    CurrentUser,
    TokenValidationError,
    create_session_token,
    get_auth_settings,
    get_current_user,
)
from grammar_trainer.errors import StoreUnavailableError
from grammar_trainer.models import LoginRequest, LoginResponse
from grammar_trainer.repositories import get_user_repository, hash_room_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, response: Response) -> LoginResponse:
    """Join a room, creating the room and the user on first use.

    The session token is set as an HttpOnly cookie.
    """
    repo = get_user_repository()
    try:
        room_id = repo.get_or_create_room(hash_room_code(request.room_code))
        user = repo.get_or_create_user(room_id, request.display_name)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    settings = get_auth_settings()
    try:
        token = create_session_token(user.id, user.room_id, user.display_name)
    except TokenValidationError as e:
        if settings.enabled:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        # Header fallback mode without a secret: no cookie to hand out
        token = None

    if token is not None:
        response.set_cookie(
            key=settings.cookie_name,
            value=token,
            max_age=settings.max_age_seconds,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
            path="/",
        )

    logger.info("User %s logged into room %s", user.id, user.room_id)
    return LoginResponse(user_id=user.id, display_name=user.display_name, room_id=user.room_id)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """Clear the session cookie."""
    response.delete_cookie(key=get_auth_settings().cookie_name, path="/")


@router.get("/me", response_model=CurrentUser)
async def me(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
    """Return the authenticated user."""
    return user
