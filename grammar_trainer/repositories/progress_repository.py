"""Repository for per-user progress: card states, daily scores and reviews.

All three record kinds live in one container partitioned by ``user_id`` and
are told apart by a ``type`` field:

- card_state   id ``state_<card_id>``
- daily_score  id ``daily_<YYYY-MM-DD>``
- review       id ``<uuid>``

Writes for one answer go through ``apply_answer``, which commits the card
state, the daily score and the review as one transactional batch. Existing
documents are replaced only if their ETag still matches the snapshot the
answer was graded against, so two concurrent answers for the same card or
day cannot both win; the loser gets ProgressConflictError and re-grades.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from azure.core import MatchConditions
from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import (
    CosmosAccessConditionFailedError,
    CosmosBatchOperationError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)

from grammar_trainer.db import get_progress_container, translate_store_errors
from grammar_trainer.errors import ProgressConflictError, StoreUnavailableError
from grammar_trainer.models import CardState, DailyScore, ReviewRecord
from grammar_trainer.srs.grading import GradedAnswer

logger = logging.getLogger(__name__)

CARD_STATE_TYPE = "card_state"
DAILY_SCORE_TYPE = "daily_score"
REVIEW_TYPE = "review"

# HTTP statuses Cosmos uses for a lost optimistic-concurrency race
_CONFLICT_STATUSES = (409, 412)


def card_state_id(card_id: str) -> str:
    return f"state_{card_id}"


def daily_score_id(date: str) -> str:
    return f"daily_{date}"


@dataclass(frozen=True)
class AnswerSnapshot:
    """The records an answer is graded against, with their ETags."""

    card_state: CardState | None
    daily_score: DailyScore | None
    card_state_etag: str | None = None
    daily_score_etag: str | None = None


def _card_state_doc(user_id: str, state: CardState) -> dict[str, Any]:
    return {
        "id": card_state_id(state.card_id),
        "type": CARD_STATE_TYPE,
        "user_id": user_id,
        **state.model_dump(),
    }


def _daily_score_doc(user_id: str, score: DailyScore) -> dict[str, Any]:
    return {
        "id": daily_score_id(score.date),
        "type": DAILY_SCORE_TYPE,
        "user_id": user_id,
        **score.model_dump(),
    }


def _review_doc(review: ReviewRecord) -> dict[str, Any]:
    return {"type": REVIEW_TYPE, **review.model_dump()}


def _write_operation(doc: dict[str, Any], etag: str | None) -> tuple:
    """Batch operation that creates ``doc``, or replaces it if ``etag`` still matches."""
    if etag is None:
        return ("create", (doc,))
    return ("replace", (doc["id"], doc), {"if_match_etag": etag})


def _batch_failure_status(error: CosmosBatchOperationError) -> int | None:
    responses = error.operation_responses or []
    index = error.error_index
    if index is not None and 0 <= index < len(responses):
        status = responses[index].get("statusCode")
        if status is not None:
            return int(status)
    return error.status_code


class ProgressRepository:
    """Repository for progress database operations."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_progress_container()
        return self._container

    def _read(self, item_id: str, user_id: str) -> dict[str, Any] | None:
        with translate_store_errors("read progress"):
            try:
                return self.container.read_item(item=item_id, partition_key=user_id)
            except CosmosResourceNotFoundError:
                return None

    def _query_type(self, user_id: str, doc_type: str) -> list[dict[str, Any]]:
        query = "SELECT * FROM c WHERE c.user_id = @userId AND c.type = @type"
        parameters = [
            {"name": "@userId", "value": user_id},
            {"name": "@type", "value": doc_type},
        ]
        with translate_store_errors("query progress"):
            return list(
                self.container.query_items(
                    query=query,
                    parameters=parameters,
                    partition_key=user_id,
                )
            )

    # Reads

    def get_card_states(self, user_id: str) -> dict[str, CardState]:
        """Return every card state of a user keyed by card id."""
        states = (CardState(**item) for item in self._query_type(user_id, CARD_STATE_TYPE))
        return {state.card_id: state for state in states}

    def get_daily_score(self, user_id: str, date: str) -> DailyScore | None:
        item = self._read(daily_score_id(date), user_id)
        return DailyScore(**item) if item is not None else None

    def list_daily_scores(self, user_id: str) -> list[DailyScore]:
        """Return every daily score of a user, oldest first."""
        scores = [DailyScore(**item) for item in self._query_type(user_id, DAILY_SCORE_TYPE)]
        return sorted(scores, key=lambda score: score.date)

    def get_answer_snapshot(self, user_id: str, card_id: str, date: str) -> AnswerSnapshot:
        """Read the card state and daily score an answer will be graded against."""
        state_item = self._read(card_state_id(card_id), user_id)
        score_item = self._read(daily_score_id(date), user_id)
        return AnswerSnapshot(
            card_state=CardState(**state_item) if state_item is not None else None,
            daily_score=DailyScore(**score_item) if score_item is not None else None,
            card_state_etag=state_item.get("_etag") if state_item is not None else None,
            daily_score_etag=score_item.get("_etag") if score_item is not None else None,
        )

    # Writes

    def upsert_card_state(self, user_id: str, state: CardState) -> CardState:
        """Create or overwrite one card state."""
        with translate_store_errors("upsert card state"):
            item = self.container.upsert_item(body=_card_state_doc(user_id, state))
        return CardState(**item)

    def upsert_daily_score(
        self, user_id: str, date: str, points_delta: int, answers_delta: int
    ) -> DailyScore:
        """Add to a daily score, creating it with the deltas if absent.

        Raises:
            ProgressConflictError: If the score changed between read and write
        """
        item = self._read(daily_score_id(date), user_id)
        current = DailyScore(**item) if item is not None else DailyScore(date=date)
        updated = DailyScore(
            date=date,
            points=current.points + points_delta,
            answers_count=current.answers_count + answers_delta,
        )
        doc = _daily_score_doc(user_id, updated)

        with translate_store_errors("upsert daily score"):
            try:
                if item is None:
                    written = self.container.create_item(body=doc)
                else:
                    written = self.container.replace_item(
                        item=doc["id"],
                        body=doc,
                        etag=item.get("_etag"),
                        match_condition=MatchConditions.IfNotModified,
                    )
            except (CosmosResourceExistsError, CosmosAccessConditionFailedError) as e:
                raise ProgressConflictError(
                    f"Daily score {date} of user {user_id} changed concurrently"
                ) from e
        return DailyScore(**written)

    def apply_answer(
        self,
        user_id: str,
        snapshot: AnswerSnapshot,
        graded: GradedAnswer,
        review: ReviewRecord,
    ) -> None:
        """Atomically store the outcome of one graded answer.

        Raises:
            ProgressConflictError: If the state or score changed since ``snapshot`` was read
            StoreUnavailableError: If the store rejected the batch for any other reason
        """
        operations = [
            _write_operation(_card_state_doc(user_id, graded.card_state), snapshot.card_state_etag),
            _write_operation(_daily_score_doc(user_id, graded.daily_score), snapshot.daily_score_etag),
            ("create", (_review_doc(review),)),
        ]

        with translate_store_errors("apply answer"):
            try:
                self.container.execute_item_batch(
                    batch_operations=operations,
                    partition_key=user_id,
                )
            except CosmosBatchOperationError as e:
                status = _batch_failure_status(e)
                if status in _CONFLICT_STATUSES:
                    raise ProgressConflictError(
                        f"Progress of user {user_id} for card {graded.card_state.card_id} changed concurrently"
                    ) from e
                logger.error("Answer batch rejected for user %s with status %s", user_id, status)
                raise StoreUnavailableError("Store rejected the answer batch") from e


# Singleton instance
_progress_repository: ProgressRepository | None = None


def get_progress_repository() -> ProgressRepository:
    """Get the progress repository singleton."""
    global _progress_repository
    if _progress_repository is None:
        _progress_repository = ProgressRepository()
    return _progress_repository
