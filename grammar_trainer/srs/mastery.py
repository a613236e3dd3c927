"""Dashboard aggregation and unit mastery models.

Two mastery models exist; exactly one is configured per deployment:

- CardCountModel: a unit is complete once ``threshold`` of its cards reach box 4.
- SubtopicCoverageModel: a subtopic is mastered once ``min_mastered_per_subtopic``
  of its cards reach box 4, and a unit is complete once ``completion_fraction``
  of its subtopics are mastered.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Union

from grammar_trainer.models.card import Card
from grammar_trainer.models.dashboard import DashboardData, MasteryModelName, UnitMastery
from grammar_trainer.models.progress import CardState, DailyScore

from .grading import DAILY_ANSWER_CAP
from .leitner import MAX_BOX
from .time import parse_iso_z


@dataclass(frozen=True)
class CardCountModel:
    threshold: int = 15

    name: ClassVar[MasteryModelName] = "card_count"

    def __post_init__(self) -> None:
        if self.threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {self.threshold}")


@dataclass(frozen=True)
class SubtopicCoverageModel:
    min_mastered_per_subtopic: int = 3
    completion_fraction: float = 0.8

    name: ClassVar[MasteryModelName] = "subtopic_coverage"

    def __post_init__(self) -> None:
        if self.min_mastered_per_subtopic < 1:
            raise ValueError(
                f"min_mastered_per_subtopic must be >= 1, got {self.min_mastered_per_subtopic}"
            )
        if not 0 < self.completion_fraction <= 1:
            raise ValueError(f"completion_fraction must be in (0, 1], got {self.completion_fraction}")


MasteryModel = Union[CardCountModel, SubtopicCoverageModel]


@dataclass
class _UnitTally:
    total: int = 0
    seen: int = 0
    mastered: int = 0
    # subtopic -> cards of that subtopic at box 4
    subtopics: dict[str, int] = field(default_factory=dict)


def _unit_mastery(unit_id: str, tally: _UnitTally, model: MasteryModel) -> UnitMastery:
    if isinstance(model, CardCountModel):
        mastered_subtopics = 0
        ratio = min(1.0, tally.mastered / model.threshold)
        completed = tally.mastered >= model.threshold
    elif isinstance(model, SubtopicCoverageModel):
        mastered_subtopics = sum(
            1 for count in tally.subtopics.values() if count >= model.min_mastered_per_subtopic
        )
        ratio = mastered_subtopics / len(tally.subtopics) if tally.subtopics else 0.0
        completed = bool(tally.subtopics) and ratio >= model.completion_fraction
    else:
        raise TypeError(f"Unsupported mastery model: {model!r}")

    return UnitMastery(
        unit_id=unit_id,
        total_cards=tally.total,
        seen_cards=tally.seen,
        mastered_cards=tally.mastered,
        total_subtopics=len(tally.subtopics),
        mastered_subtopics=mastered_subtopics,
        mastery_ratio=ratio,
        completed=completed,
    )


def count_due(card_states: Iterable[CardState], now: datetime) -> int:
    """Count states whose due date has passed."""
    return sum(1 for state in card_states if parse_iso_z(state.due_date) <= now)


def compute_dashboard(
    cards: Iterable[Card],
    card_states: Mapping[str, CardState],
    todays_score: DailyScore | None,
    model: MasteryModel,
    now: datetime,
) -> DashboardData:
    """Summarize a user's progress across every unit of the catalog."""
    tallies: dict[str, _UnitTally] = defaultdict(_UnitTally)
    for card in cards:
        tally = tallies[card.unit_id]
        tally.total += 1
        tally.subtopics.setdefault(card.subtopic, 0)

        state = card_states.get(card.id)
        if state is None:
            continue
        tally.seen += 1
        if state.box == MAX_BOX:
            tally.mastered += 1
            tally.subtopics[card.subtopic] += 1

    return DashboardData(
        due_count=count_due(card_states.values(), now),
        daily_points=todays_score.points if todays_score is not None else 0,
        answers_today=todays_score.answers_count if todays_score is not None else 0,
        daily_answer_cap=DAILY_ANSWER_CAP,
        mastery_model=model.name,
        unit_mastery=[
            _unit_mastery(unit_id, tallies[unit_id], model) for unit_id in sorted(tallies)
        ],
    )
