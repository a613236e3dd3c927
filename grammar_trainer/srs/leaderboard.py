"""Room leaderboard ranking."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from grammar_trainer.models.leaderboard import LeaderboardRange, LeaderboardRow
from grammar_trainer.models.progress import CardState, DailyScore

from .leitner import MAX_BOX
from .time import shift_date_key


# Days covered by each bounded range, today included
RANGE_DAYS: dict[str, int] = {
    "today": 1,
    "week": 7,
}


@dataclass(frozen=True)
class RoomMember:
    user_id: str
    display_name: str


def range_start_key(range_: LeaderboardRange, today_key: str) -> str | None:
    """Return the first day counted by ``range_``, or None for all-time."""
    if range_ == "all":
        return None
    if range_ not in RANGE_DAYS:
        raise ValueError(f"Invalid leaderboard range: {range_}")
    return shift_date_key(today_key, -(RANGE_DAYS[range_] - 1))


def current_streak(active_day_keys: set[str], today_key: str) -> int:
    """Count consecutive active days walking backward from today."""
    streak = 0
    cursor = today_key
    while cursor in active_day_keys:
        streak += 1
        cursor = shift_date_key(cursor, -1)
    return streak


def rank_leaderboard(
    members: Iterable[RoomMember],
    range_: LeaderboardRange,
    daily_scores_by_user: Mapping[str, Iterable[DailyScore]],
    card_states_by_user: Mapping[str, Iterable[CardState]],
    today_key: str,
) -> list[LeaderboardRow]:
    """Rank room members.

    Points are summed over the days in ``range_``. Mastered counts and
    streaks ignore the range. A day is active when it earned points.

    Order: points desc, mastered desc, streak desc, display name asc, and
    finally user id so the order is total even for duplicate names.
    """
    start_key = range_start_key(range_, today_key)

    ranked: list[tuple[tuple, LeaderboardRow]] = []
    for member in members:
        scores = list(daily_scores_by_user.get(member.user_id, ()))
        points = sum(
            score.points
            for score in scores
            if score.date <= today_key and (start_key is None or score.date >= start_key)
        )
        active_days = {score.date for score in scores if score.points > 0}
        mastered = sum(
            1 for state in card_states_by_user.get(member.user_id, ()) if state.box == MAX_BOX
        )
        row = LeaderboardRow(
            display_name=member.display_name,
            points=points,
            mastered=mastered,
            streak=current_streak(active_days, today_key),
        )
        sort_key = (-row.points, -row.mastered, -row.streak, row.display_name, member.user_id)
        ranked.append((sort_key, row))

    ranked.sort(key=lambda entry: entry[0])
    return [row for _, row in ranked]
