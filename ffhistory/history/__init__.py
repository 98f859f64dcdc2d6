from .aggregate import AggregationReport, StatsAggregator, accumulate_season
from .chain import ChainCache, LeagueChainResolver
from .service import HistoryService

__all__ = [
    "AggregationReport",
    "StatsAggregator",
    "accumulate_season",
    "ChainCache",
    "LeagueChainResolver",
    "HistoryService",
]
