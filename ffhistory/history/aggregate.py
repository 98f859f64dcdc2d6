"""Per-user totals merged across every season of a league chain."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from ffhistory.api.port import SeasonDataPort
from ffhistory.compute.core import JoinResult, final_week_winners, join_users_rosters, league_weeks
from ffhistory.config import ChampionshipRule, FinishRule
from ffhistory.models import AggregatedUserStats, LeagueSeason, Roster, User, WeeklyMatchup

from .chain import LeagueChainResolver

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SeasonData:
    league: LeagueSeason
    users: list[User]
    rosters: list[Roster]
    weekly: list[list[WeeklyMatchup]] = field(default_factory=list)


@dataclass(slots=True)
class AggregationReport:
    stats: list[AggregatedUserStats] = field(default_factory=list)
    season_ids: list[str] = field(default_factory=list)
    # season id -> identifiers dropped by the user/roster join
    skipped_rosters: dict[str, list[int]] = field(default_factory=dict)
    skipped_users: dict[str, list[str]] = field(default_factory=dict)

    @property
    def skipped_count(self) -> int:
        return sum(len(v) for v in self.skipped_rosters.values()) + sum(
            len(v) for v in self.skipped_users.values()
        )


def _placement(roster: Roster, rule: FinishRule) -> int | None:
    if rule is FinishRule.RANK:
        return roster.rank if roster.rank and roster.rank > 0 else None
    return roster.roster_id


def sort_stats(stats: list[AggregatedUserStats]) -> list[AggregatedUserStats]:
    # Equal percentages keep first-seen order (stable sort)
    return sorted(stats, key=lambda s: -s.win_percentage)


def accumulate_season(
    acc: dict[str, AggregatedUserStats],
    season: SeasonData,
    *,
    championship_rule: ChampionshipRule = ChampionshipRule.ROSTER_ID,
    finish_rule: FinishRule = FinishRule.ROSTER_ID,
) -> JoinResult:
    """Fold one season into ``acc`` (user id -> running totals); returns the join result.

    Only sums, counters and minimums are touched, so the final totals do not depend
    on the order seasons are folded in. Display fields come from the first season
    that introduces a user.
    """
    joined = join_users_rosters(season.users, season.rosters)
    playoff_teams = season.league.playoff_teams
    champions: set[int] = set()
    if championship_rule is ChampionshipRule.FINAL_WEEK:
        champions = final_week_winners(season.weekly)

    for user, roster in joined.pairs:
        s = acc.get(user.user_id)
        if s is None:
            s = acc[user.user_id] = AggregatedUserStats(
                user_id=user.user_id, username=user.display_name, avatar=user.avatar
            )
        s.wins += roster.wins
        s.losses += roster.losses
        s.ties += roster.ties
        s.points_for_hundredths += roster.points_for_hundredths
        s.points_against_hundredths += roster.points_against_hundredths
        s.seasons += 1

        place = _placement(roster, finish_rule)
        if place is not None:
            if s.best_finish is None or place < s.best_finish:
                s.best_finish = place
            if place <= playoff_teams:
                s.playoff_appearances += 1

        if championship_rule is ChampionshipRule.FINAL_WEEK:
            if roster.roster_id in champions:
                s.championships += 1
        elif roster.roster_id == 1:
            s.championships += 1

        s.recompute()
    return joined


class StatsAggregator:
    def __init__(
        self,
        port: SeasonDataPort,
        resolver: LeagueChainResolver,
        *,
        championship_rule: ChampionshipRule = ChampionshipRule.ROSTER_ID,
        finish_rule: FinishRule = FinishRule.ROSTER_ID,
    ) -> None:
        self.port = port
        self.resolver = resolver
        self.championship_rule = championship_rule
        self.finish_rule = finish_rule

    async def fetch_season(self, season_id: str) -> SeasonData:
        """Fetch everything one season contributes. Failures propagate."""
        league, users, rosters = await asyncio.gather(
            self.port.get_league_info(season_id),
            self.port.get_league_users(season_id),
            self.port.get_league_rosters(season_id),
        )
        weekly: list[list[WeeklyMatchup]] = []
        if self.championship_rule is ChampionshipRule.FINAL_WEEK:
            weeks = range(1, league_weeks(league) + 1)
            weekly = list(
                await asyncio.gather(*(self.port.get_league_matchups(season_id, wk) for wk in weeks))
            )
        return SeasonData(league=league, users=users, rosters=rosters, weekly=weekly)

    async def run(self, season_id: str) -> AggregationReport:
        chain = await self.resolver.resolve_chain(season_id)
        return await self.run_chain(chain)

    async def run_chain(self, chain: Sequence[str]) -> AggregationReport:
        ids = list(dict.fromkeys(chain))
        seasons = await asyncio.gather(*(self.fetch_season(sid) for sid in ids))
        acc: dict[str, AggregatedUserStats] = {}
        report = AggregationReport(season_ids=ids)
        for sid, season in zip(ids, seasons):
            joined = accumulate_season(
                acc,
                season,
                championship_rule=self.championship_rule,
                finish_rule=self.finish_rule,
            )
            if joined.skipped:
                report.skipped_rosters[sid] = joined.skipped_roster_ids
                report.skipped_users[sid] = joined.skipped_user_ids
                logger.warning(
                    "season %s (%s): skipped rosters=%s users=%s",
                    sid,
                    season.league.season,
                    joined.skipped_roster_ids,
                    joined.skipped_user_ids,
                )
        report.stats = sort_stats(list(acc.values()))
        return report

    async def aggregate_user_stats(self, season_id: str) -> list[AggregatedUserStats]:
        return (await self.run(season_id)).stats
