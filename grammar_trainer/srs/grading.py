"""Answer grading: Leitner transition plus daily scoring.

This module contains the pure function that turns one submitted answer into
the new card state, the new daily score and the feedback shown to the
learner. Persisting the outcome is the caller's job; the two records must be
written together.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from grammar_trainer.errors import InvalidInputError
from grammar_trainer.models.card import Card
from grammar_trainer.models.progress import CardState, DailyScore
from grammar_trainer.models.session import AnswerResult

from .leitner import due_date_for_box, next_box
from .time import utc_date_key, utc_datetime_to_iso_z


# Answers per UTC day that can still earn points
DAILY_ANSWER_CAP = 60

NEW_CARD_POINTS = 1
REVIEW_POINTS = 2


@dataclass(frozen=True)
class GradedAnswer:
    result: AnswerResult
    card_state: CardState
    daily_score: DailyScore
    points_delta: int


def normalize_choice(choice: str) -> str:
    return choice.strip().upper()


def points_for_answer(correct: bool, is_new_card: bool, answers_today: int) -> int:
    """Compute the points one answer earns.

    Rules:
    - Incorrect answers earn nothing
    - Once ``answers_today`` reaches DAILY_ANSWER_CAP, nothing more is earned
    - A card answered for the first time earns NEW_CARD_POINTS
    - A review of a previously answered card earns REVIEW_POINTS
    """
    if not correct or answers_today >= DAILY_ANSWER_CAP:
        return 0
    return NEW_CARD_POINTS if is_new_card else REVIEW_POINTS


def grade_answer(
    card: Card,
    submitted_choice: str,
    prior_state: CardState | None,
    todays_score: DailyScore | None,
    now: datetime,
) -> GradedAnswer:
    """Grade one answer against the card and the user's current progress.

    Args:
        card: The card being answered
        submitted_choice: Option key the learner picked (case and whitespace insensitive)
        prior_state: The user's state for this card, None if never answered
        todays_score: The user's score for the UTC day of ``now``, None if no answers yet
        now: Instant the answer is graded at

    Returns:
        The feedback, the card state to store and the daily score to store

    Raises:
        InvalidInputError: If the choice is not one of the card's option keys
        ValueError: If the prior records do not belong to this card or day
    """
    choice = normalize_choice(submitted_choice)
    if choice not in card.choices:
        raise InvalidInputError(
            f"choice must be one of {', '.join(sorted(card.choices))}, got {submitted_choice!r}"
        )

    if prior_state is not None and prior_state.card_id != card.id:
        raise ValueError(f"prior state belongs to card {prior_state.card_id}, not {card.id}")

    day = utc_date_key(now)
    if todays_score is not None and todays_score.date != day:
        raise ValueError(f"daily score is for {todays_score.date}, not {day}")

    is_new_card = prior_state is None
    correct = choice == card.correct_choice
    new_box = next_box(None if is_new_card else prior_state.box, correct)
    due_date = due_date_for_box(now, new_box)

    prior_streak = 0 if is_new_card else prior_state.correct_streak
    prior_attempts = 0 if is_new_card else prior_state.total_attempts
    card_state = CardState(
        card_id=card.id,
        box=new_box,
        due_date=due_date,
        correct_streak=prior_streak + 1 if correct else 0,
        total_attempts=prior_attempts + 1,
        last_seen_at=utc_datetime_to_iso_z(now),
    )

    answers_before = todays_score.answers_count if todays_score is not None else 0
    points_before = todays_score.points if todays_score is not None else 0
    points_awarded = points_for_answer(correct, is_new_card, answers_before)
    daily_score = DailyScore(
        date=day,
        points=points_before + points_awarded,
        answers_count=answers_before + 1,
    )

    result = AnswerResult(
        card_id=card.id,
        is_new_card=is_new_card,
        correct=correct,
        correct_choice=card.correct_choice,
        explanation=card.explanation,
        new_box=new_box,
        due_date=due_date,
        requeue_in_session=not correct,
        points_awarded=points_awarded,
        daily_points=daily_score.points,
        answers_today=daily_score.answers_count,
    )
    return GradedAnswer(
        result=result,
        card_state=card_state,
        daily_score=daily_score,
        points_delta=points_awarded,
    )
