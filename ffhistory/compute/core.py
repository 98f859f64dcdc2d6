from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ffhistory.constants import DEFAULT_TOTAL_WEEKS, PLAYOFF_WEEKS
from ffhistory.models import LeagueSeason, Roster, User, WeeklyMatchup


@dataclass(slots=True)
class JoinResult:
    """Users paired with their season roster, plus whatever failed to pair."""

    pairs: list[tuple[User, Roster]] = field(default_factory=list)
    skipped_roster_ids: list[int] = field(default_factory=list)
    skipped_user_ids: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.skipped_roster_ids) + len(self.skipped_user_ids)


def join_users_rosters(users: Iterable[User], rosters: Iterable[Roster]) -> JoinResult:
    """Pair each user with the roster it owns.

    Rosters without an owner (or whose owner is not a league member) and users
    without a roster are reported, not raised.
    """
    by_owner: dict[str, Roster] = {}
    result = JoinResult()
    for r in rosters:
        if r.owner_id and r.owner_id not in by_owner:
            by_owner[r.owner_id] = r
        else:
            result.skipped_roster_ids.append(r.roster_id)
    seen: set[str] = set()
    for u in users:
        roster = by_owner.get(u.user_id)
        if roster is None:
            result.skipped_user_ids.append(u.user_id)
            continue
        seen.add(u.user_id)
        result.pairs.append((u, roster))
    for owner, r in by_owner.items():
        if owner not in seen:
            result.skipped_roster_ids.append(r.roster_id)
    return result


def group_rows(rows: Iterable[WeeklyMatchup]) -> dict[int, list[WeeklyMatchup]]:
    groups: dict[int, list[WeeklyMatchup]] = {}
    for row in rows or []:
        if row.matchup_id is None:
            # Deterministic synthetic id so byes never pair with anyone
            mid = -100000 - row.roster_id
        else:
            mid = row.matchup_id
        groups.setdefault(mid, []).append(row)
    return groups


def opponents_by_week(
    weekly: Sequence[Sequence[WeeklyMatchup]],
) -> dict[tuple[int, int], WeeklyMatchup]:
    """Map ``(week, roster_id)`` to the opposing row sharing its pairing id that week."""
    out: dict[tuple[int, int], WeeklyMatchup] = {}
    for rows in weekly:
        for entries in group_rows(rows).values():
            if len(entries) != 2:
                continue
            a, b = entries
            out[(a.week, a.roster_id)] = b
            out[(b.week, b.roster_id)] = a
    return out


def is_scored(row: WeeklyMatchup) -> bool:
    """Sleeper reports unplayed weeks as 0 (sometimes null); neither counts as a score."""
    return row.points is not None and row.points > 0


def scored(weekly: Iterable[Iterable[WeeklyMatchup]]) -> list[WeeklyMatchup]:
    return [r for rows in weekly for r in rows if is_scored(r)]


def league_weeks(league: LeagueSeason) -> int:
    """Number of weeks to fetch for a season: regular season plus playoff rounds."""
    if league.playoff_week_start <= 0:
        return DEFAULT_TOTAL_WEEKS
    return league.playoff_week_start + PLAYOFF_WEEKS - 1


def format_record(wins: int, losses: int, ties: int = 0) -> str:
    return f"{wins}-{losses}-{ties}" if ties > 0 else f"{wins}-{losses}"


def final_week_winners(weekly: Sequence[Sequence[WeeklyMatchup]]) -> set[int]:
    """Roster ids that won a scored head-to-head game in the last week with any scores."""
    last = next((rows for rows in reversed(weekly) if any(is_scored(r) for r in rows)), [])
    winners: set[int] = set()
    for entries in group_rows(last).values():
        if len(entries) != 2:
            continue
        a, b = entries
        if not (is_scored(a) and is_scored(b)):
            continue
        if a.points > b.points:
            winners.add(a.roster_id)
        elif b.points > a.points:
            winners.add(b.roster_id)
    return winners
