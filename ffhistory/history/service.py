"""Operations exposed to the presentation layer."""

from __future__ import annotations

import asyncio
import logging

from ffhistory.api.port import SeasonDataPort, SleeperSeasonData
from ffhistory.compute.core import league_weeks
from ffhistory.compute.metrics import MetricsReport, compute_season_metrics, merge_team_metrics
from ffhistory.config import ChampionshipRule, FinishRule, HistoryConfig
from ffhistory.constants import ALL_TIME, DEFAULT_MAX_CHAIN_DEPTH
from ffhistory.errors import SeasonNotFound
from ffhistory.models import AggregatedUserStats, TeamMetrics

from .aggregate import AggregationReport, StatsAggregator
from .chain import ChainCache, LeagueChainResolver

logger = logging.getLogger(__name__)


class HistoryService:
    """Chain resolution, aggregation and team metrics over one ``SeasonDataPort``.

    The chain cache lives as long as the service; build one service per request
    or session when serving several tenants.
    """

    def __init__(
        self,
        port: SeasonDataPort,
        *,
        cache: ChainCache | None = None,
        max_chain_depth: int = DEFAULT_MAX_CHAIN_DEPTH,
        championship_rule: ChampionshipRule = ChampionshipRule.ROSTER_ID,
        finish_rule: FinishRule = FinishRule.ROSTER_ID,
    ) -> None:
        self.port = port
        self.cache = cache if cache is not None else ChainCache()
        self.resolver = LeagueChainResolver(port, self.cache, max_depth=max_chain_depth)
        self.aggregator = StatsAggregator(
            port,
            self.resolver,
            championship_rule=championship_rule,
            finish_rule=finish_rule,
        )

    @classmethod
    def from_config(cls, config: HistoryConfig, port: SeasonDataPort | None = None) -> HistoryService:
        return cls(
            port if port is not None else SleeperSeasonData.from_config(config),
            max_chain_depth=config.max_chain_depth,
            championship_rule=config.championship_rule,
            finish_rule=config.finish_rule,
        )

    async def resolve_season_chain(self, season_id: str) -> list[str]:
        return await self.resolver.resolve_chain(season_id)

    async def season_labels(self, season_id: str) -> list[str]:
        """Season labels of the chain, newest first (unknown labels omitted)."""
        return [season for _, season in await self.resolver.resolve_links(season_id) if season]

    async def league_id_for_season(self, season_id: str, season: str) -> str:
        for league_id, label in await self.resolver.resolve_links(season_id):
            if label == str(season):
                return league_id
        raise SeasonNotFound(str(season), season_id)

    async def aggregation_report(self, season_id: str) -> AggregationReport:
        return await self.aggregator.run(season_id)

    async def aggregate_user_stats(self, season_id: str) -> list[AggregatedUserStats]:
        return await self.aggregator.aggregate_user_stats(season_id)

    async def season_metrics(self, league_id: str) -> MetricsReport:
        league, users, rosters = await asyncio.gather(
            self.port.get_league_info(league_id),
            self.port.get_league_users(league_id),
            self.port.get_league_rosters(league_id),
        )
        weeks = range(1, league_weeks(league) + 1)
        weekly = await asyncio.gather(*(self.port.get_league_matchups(league_id, wk) for wk in weeks))
        report = compute_season_metrics(users, rosters, list(weekly))
        logger.debug(
            "metrics %s (%s): %d teams, league average %.2f",
            league_id,
            league.season,
            len(report.metrics),
            report.league_average,
        )
        return report

    async def team_metrics_report(self, season_id: str, season: str | None = ALL_TIME) -> MetricsReport:
        if season is None or season == ALL_TIME:
            chain = await self.resolver.resolve_chain(season_id)
            reports = await asyncio.gather(*(self.season_metrics(lid) for lid in chain))
            return merge_team_metrics(reports)
        league_id = await self.league_id_for_season(season_id, season)
        return await self.season_metrics(league_id)

    async def get_team_metrics(self, season_id: str, season: str | None = ALL_TIME) -> list[TeamMetrics]:
        """Team metrics for one season label, or merged across the chain for ``"all-time"``."""
        return (await self.team_metrics_report(season_id, season)).metrics
