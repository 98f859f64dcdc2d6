"""Environment-driven configuration for the history engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from ffhistory.constants import (
    DEFAULT_FETCH_TIMEOUT_SEC,
    DEFAULT_MAX_CHAIN_DEPTH,
)


class ChampionshipRule(str, Enum):
    """How a season's champion is detected.

    ``ROSTER_ID`` treats roster id 1 as champion (legacy dashboard behavior; roster
    ids are arbitrary so this is a placeholder). ``FINAL_WEEK`` credits the winner
    of a scored head-to-head game in the league's final week.
    """

    ROSTER_ID = "roster_id"
    FINAL_WEEK = "final_week"


class FinishRule(str, Enum):
    """Source of the placement used for best finish and playoff appearances."""

    ROSTER_ID = "roster_id"
    RANK = "rank"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class HistoryConfig:
    base_url: str = "https://api.sleeper.com/v1"
    league_id: str | None = None
    sport: str = "nfl"
    rpm_limit: float | None = None
    min_interval_ms: float | None = None
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_SEC
    max_chain_depth: int = DEFAULT_MAX_CHAIN_DEPTH
    championship_rule: ChampionshipRule = ChampionshipRule.ROSTER_ID
    finish_rule: FinishRule = FinishRule.ROSTER_ID

    @classmethod
    def from_env(cls) -> "HistoryConfig":
        """Build a config from ``SLEEPER_*`` / ``FFHISTORY_*`` environment variables.

        Numeric values that fail to parse fall back to defaults. Unknown rule names
        raise ``ValueError`` so a typo never silently changes the counting rules.
        """
        rpm = _env_float("SLEEPER_RPM_LIMIT", 0.0)
        min_ms = _env_float("SLEEPER_MIN_INTERVAL_MS", 0.0)
        return cls(
            base_url=os.environ.get("SLEEPER_BASE_URL", "https://api.sleeper.com/v1"),
            league_id=os.environ.get("SLEEPER_LEAGUE_ID") or None,
            sport=os.environ.get("SLEEPER_SPORT", "nfl"),
            rpm_limit=rpm or None,
            min_interval_ms=min_ms or None,
            fetch_timeout=_env_float("SLEEPER_FETCH_TIMEOUT_SEC", DEFAULT_FETCH_TIMEOUT_SEC),
            max_chain_depth=_env_int("SLEEPER_MAX_CHAIN_DEPTH", DEFAULT_MAX_CHAIN_DEPTH),
            championship_rule=ChampionshipRule(
                os.environ.get("FFHISTORY_CHAMPIONSHIP_RULE", ChampionshipRule.ROSTER_ID.value)
            ),
            finish_rule=FinishRule(os.environ.get("FFHISTORY_FINISH_RULE", FinishRule.ROSTER_ID.value)),
        )
