"""Practice session API router."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from grammar_trainer.auth import CurrentUser, get_current_user
from grammar_trainer.errors import (
    InvalidInputError,
    ProgressConflictError,
    StoreUnavailableError,
)
from grammar_trainer.models import (
    AnswerRequest,
    AnswerResponse,
    Card,
    ReviewRecord,
    SessionCounts,
    SessionStartRequest,
    SessionStartResponse,
    SessionSummary,
)
from grammar_trainer.repositories import (
    CardNotFoundError,
    get_card_repository,
    get_progress_repository,
)
from grammar_trainer.sessions import get_practice_store
from grammar_trainer.srs.grading import GradedAnswer, grade_answer, normalize_choice
from grammar_trainer.srs.scheduler import WARMUP_SESSION_SIZE, build_session, clamp_session_size
from grammar_trainer.srs.time import utc_date_key, utc_datetime_to_iso_z, utc_now

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/session", tags=["session"])

# Attempts at writing one answer before a concurrent-update conflict is reported
MAX_ANSWER_ATTEMPTS = 3

NOTHING_TO_PRACTICE = "Nothing to practice right now."


def _store_unavailable(e: StoreUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)


def start_practice_session(user_id: str, size: int, unit_id: str | None = None) -> SessionStartResponse:
    """Select cards for a new session and make it the user's active session.

    ``size`` is used as given; callers clamp untrusted sizes first.
    """
    cards = get_card_repository().list_cards()
    states = get_progress_repository().get_card_states(user_id)
    selected = build_session(cards, states, size, utc_now(), unit_id=unit_id)

    store = get_practice_store()
    if not selected:
        store.reset(user_id)
        return SessionStartResponse(
            session_size=size,
            unit_id=unit_id,
            counts=SessionCounts(),
            cards=[],
            message=NOTHING_TO_PRACTICE,
        )

    session = store.start(user_id, selected)
    counts = Counter(card.source for card in selected)
    logger.info(
        "Started session %s for user %s: %d due, %d new, %d near due",
        session.session_id,
        user_id,
        counts["due"],
        counts["new"],
        counts["near_due"],
    )
    return SessionStartResponse(
        session_id=session.session_id,
        session_size=size,
        unit_id=unit_id,
        counts=SessionCounts(**counts),
        cards=selected,
    )


def record_graded_answer(user_id: str, card: Card, choice: str, response_ms: float = 0) -> GradedAnswer:
    """Grade an answer against the user's stored progress and persist the outcome.

    The card state, daily score and review record are written as one batch
    guarded by the ETags of the records the answer was graded against. When
    another answer wins the race, the records are re-read and the answer is
    graded again, up to MAX_ANSWER_ATTEMPTS times.

    Raises:
        InvalidInputError: If the choice is not one of the card's option keys
        ProgressConflictError: If every attempt lost a concurrent-update race
        StoreUnavailableError: If the progress store fails
    """
    progress_repo = get_progress_repository()
    attempt = 1
    while True:
        now = utc_now()
        snapshot = progress_repo.get_answer_snapshot(user_id, card.id, utc_date_key(now))
        graded = grade_answer(card, choice, snapshot.card_state, snapshot.daily_score, now)
        review = ReviewRecord(
            user_id=user_id,
            card_id=card.id,
            timestamp=utc_datetime_to_iso_z(now),
            correct=graded.result.correct,
            choice=normalize_choice(choice),
            response_ms=int(round(response_ms)),
        )

        try:
            progress_repo.apply_answer(user_id, snapshot, graded, review)
        except ProgressConflictError:
            if attempt >= MAX_ANSWER_ATTEMPTS:
                logger.error(
                    "Giving up on answer for user %s card %s after %d conflicts",
                    user_id,
                    card.id,
                    attempt,
                )
                raise
            logger.warning(
                "Progress of user %s for card %s changed concurrently, retrying (%d/%d)",
                user_id,
                card.id,
                attempt,
                MAX_ANSWER_ATTEMPTS,
            )
            attempt += 1
            continue

        logger.info(
            "Answer graded: user=%s card=%s correct=%s box=%d points=%d",
            user_id,
            card.id,
            graded.result.correct,
            graded.result.new_box,
            graded.points_delta,
        )
        return graded


@router.post("/start", response_model=SessionStartResponse)
async def start_session(
    request: SessionStartRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SessionStartResponse:
    """Start a practice session of 10-20 cards, optionally within one unit."""
    try:
        return start_practice_session(user.user_id, clamp_session_size(request.size), request.unit_id)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except StoreUnavailableError as e:
        raise _store_unavailable(e)


@router.post("/warmup", response_model=SessionStartResponse)
async def start_warmup(
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SessionStartResponse:
    """Start the short onboarding session for a new learner."""
    try:
        return start_practice_session(user.user_id, WARMUP_SESSION_SIZE)
    except StoreUnavailableError as e:
        raise _store_unavailable(e)


@router.post("/answer", response_model=AnswerResponse)
async def submit_answer(
    request: AnswerRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> AnswerResponse:
    """Grade an answer and advance the caller's practice session."""
    try:
        card = get_card_repository().get_by_id(request.card_id)
        graded = record_graded_answer(user.user_id, card, request.choice, request.response_ms)
    except CardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {request.card_id} not found",
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ProgressConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Progress was updated concurrently, please answer again",
        )
    except StoreUnavailableError as e:
        raise _store_unavailable(e)

    session = get_practice_store().record_answer(
        user.user_id, card.id, graded.result.correct, graded.points_delta
    )
    return AnswerResponse(
        **graded.result.model_dump(),
        remaining_in_session=session.remaining if session is not None else None,
    )


@router.get("/summary", response_model=SessionSummary)
async def get_session_summary(
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SessionSummary:
    """Summarize the caller's active practice session."""
    session = get_practice_store().get(user.user_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active practice session",
        )
    return session.summary()
