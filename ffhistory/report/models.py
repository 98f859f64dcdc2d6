from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ffhistory.models import AggregatedUserStats, TeamMetrics


@dataclass(slots=True)
class HistoryContext:
    league_id: str
    view: str
    chain: list[tuple[str, str]]
    season: str | None = None
    stats: list[AggregatedUserStats] | None = None
    metrics: list[TeamMetrics] | None = None
    league_average: float | None = None
    skipped: dict[str, list[Any]] = field(default_factory=dict)
    meta_rows: list[list[str]] = field(default_factory=list)

    def to_json_payload(self, schema_version: str) -> dict[str, Any]:
        base: dict[str, Any] = {
            "schema_version": schema_version,
            "metadata": {k: v for k, v in self.meta_rows},
            "chain": [{"league_id": lid, "season": season} for lid, season in self.chain],
        }
        if self.stats is not None:
            base["aggregated_stats"] = [s.to_dict() for s in self.stats]
        if self.metrics is not None:
            base["team_metrics"] = [m.to_dict() for m in self.metrics]
            base["league_average"] = self.league_average
        if self.skipped:
            base["skipped"] = self.skipped
        return base
