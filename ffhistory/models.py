from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from ffhistory.constants import POINTS_PLACES, WIN_PCT_PLACES


def _coerce_int(value: object, default: int = 0) -> int:
    """Best‑effort int conversion (supports int, float, str of digits)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _optional_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    coerced = _coerce_int(value, -1)
    return None if coerced < 0 else coerced


def _optional_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _league_ref(value: object) -> str | None:
    # Upstream reports "no predecessor" as null, "" or "0"
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value == "0":
        return None
    return value


def to_hundredths(whole: object, fractional: object) -> int:
    """Combine a ``(whole, fractional)`` point pair into integer hundredths."""
    return _coerce_int(whole) * 100 + _coerce_int(fractional)


def combine_points(whole: object, fractional: object) -> float:
    """``whole=123, fractional=45`` -> ``123.45``."""
    return round(to_hundredths(whole, fractional) / 100, POINTS_PLACES)


def win_percentage(wins: int, losses: int, ties: int) -> float:
    games = wins + losses + ties
    if not games:
        return 0.0
    return (wins + 0.5 * ties) / games * 100


@dataclass(frozen=True, slots=True)
class LeagueSeason:
    league_id: str
    season: str
    name: str = ""
    total_rosters: int = 0
    playoff_teams: int = 0
    playoff_week_start: int = 0
    previous_league_id: str | None = None

    @classmethod
    def from_api(cls, payload: dict) -> LeagueSeason:
        settings = payload.get("settings") or {}
        if not isinstance(settings, dict):
            settings = {}
        return cls(
            league_id=str(payload.get("league_id") or ""),
            season=str(payload.get("season") or ""),
            name=str(payload.get("name") or ""),
            total_rosters=_coerce_int(payload.get("total_rosters") or settings.get("num_teams")),
            playoff_teams=_coerce_int(settings.get("playoff_teams")),
            playoff_week_start=_coerce_int(settings.get("playoff_week_start")),
            previous_league_id=_league_ref(payload.get("previous_league_id")),
        )


@dataclass(frozen=True, slots=True)
class User:
    user_id: str
    display_name: str
    team_name: str | None = None
    avatar: str | None = None
    is_owner: bool = False

    @property
    def label(self) -> str:
        """Team name override when set, otherwise the display name."""
        return self.team_name or self.display_name

    @classmethod
    def from_api(cls, payload: dict) -> User:
        uid = str(payload.get("user_id") or "")
        meta = payload.get("metadata") or {}
        team_name = None
        if isinstance(meta, dict):
            team_name = meta.get("team_name") or None
        return cls(
            user_id=uid,
            display_name=payload.get("display_name") or payload.get("username") or uid,
            team_name=team_name,
            avatar=payload.get("avatar") or None,
            is_owner=bool(payload.get("is_owner")),
        )


@dataclass(frozen=True, slots=True)
class Roster:
    roster_id: int
    owner_id: str | None
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for_hundredths: int = 0
    points_against_hundredths: int = 0
    rank: int | None = None
    playoff_seed: int | None = None

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def points_for(self) -> float:
        return round(self.points_for_hundredths / 100, POINTS_PLACES)

    @property
    def points_against(self) -> float:
        return round(self.points_against_hundredths / 100, POINTS_PLACES)

    @classmethod
    def from_api(cls, payload: dict) -> Roster:
        s = payload.get("settings") or {}
        if not isinstance(s, dict):
            s = {}
        owner = payload.get("owner_id")
        return cls(
            roster_id=_coerce_int(payload.get("roster_id"), -1),
            owner_id=str(owner) if owner else None,
            wins=_coerce_int(s.get("wins")),
            losses=_coerce_int(s.get("losses")),
            ties=_coerce_int(s.get("ties")),
            points_for_hundredths=to_hundredths(s.get("fpts"), s.get("fpts_decimal")),
            points_against_hundredths=to_hundredths(s.get("fpts_against"), s.get("fpts_against_decimal")),
            rank=_optional_int(s.get("rank")),
            playoff_seed=_optional_int(s.get("playoff_seed")),
        )


@dataclass(frozen=True, slots=True)
class WeeklyMatchup:
    week: int
    roster_id: int
    matchup_id: int | None
    points: float | None = None

    @classmethod
    def from_api(cls, payload: dict, week: int) -> WeeklyMatchup:
        return cls(
            week=week,
            roster_id=_coerce_int(payload.get("roster_id"), -1),
            matchup_id=_optional_int(payload.get("matchup_id")),
            points=_optional_float(payload.get("points")),
        )


@dataclass(slots=True)
class AggregatedUserStats:
    user_id: str
    username: str
    avatar: str | None = None
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for_hundredths: int = 0
    points_against_hundredths: int = 0
    seasons: int = 0
    best_finish: int | None = None
    championships: int = 0
    playoff_appearances: int = 0
    win_percentage: float = 0.0
    average_points_per_game: float = 0.0

    @property
    def total_games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def points_for(self) -> float:
        return round(self.points_for_hundredths / 100, POINTS_PLACES)

    @property
    def points_against(self) -> float:
        return round(self.points_against_hundredths / 100, POINTS_PLACES)

    def recompute(self) -> None:
        games = self.total_games
        self.win_percentage = win_percentage(self.wins, self.losses, self.ties)
        self.average_points_per_game = self.points_for_hundredths / 100 / games if games else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "avatar": self.avatar,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "points_for": self.points_for,
            "points_against": self.points_against,
            "seasons": self.seasons,
            "best_finish": self.best_finish,
            "championships": self.championships,
            "playoff_appearances": self.playoff_appearances,
            "win_percentage": round(self.win_percentage, WIN_PCT_PLACES),
            "average_points_per_game": round(self.average_points_per_game, POINTS_PLACES),
        }


@dataclass(slots=True)
class RecordBlock:
    wins: int = 0
    losses: int = 0
    ties: int = 0
    win_pct: float = 0.0


@dataclass(slots=True)
class PointsBlock:
    total: float = 0.0
    average: float = 0.0
    high: float = 0.0
    low: float = 0.0
    std_dev: float = 0.0  # population std dev of weekly scores


@dataclass(slots=True)
class ConsistencyBlock:
    score: float = 0.0
    average_margin: float = 0.0  # team average minus league average


@dataclass(slots=True)
class ExplosivenessBlock:
    score: float = 0.0
    explosive_games: int = 0


@dataclass(slots=True)
class ClutchBlock:
    score: float = 0.0
    close_wins: int = 0
    close_games: int = 0


@dataclass(slots=True)
class TeamMetrics:
    user_id: str
    username: str
    avatar: str | None
    team_name: str
    record: RecordBlock = field(default_factory=RecordBlock)
    points: PointsBlock = field(default_factory=PointsBlock)
    consistency: ConsistencyBlock = field(default_factory=ConsistencyBlock)
    explosiveness: ExplosivenessBlock = field(default_factory=ExplosivenessBlock)
    clutch: ClutchBlock = field(default_factory=ClutchBlock)
    weekly_scores: list[float] = field(default_factory=list, repr=False)

    @property
    def weeks_played(self) -> int:
        return len(self.weekly_scores)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload.pop("weekly_scores", None)
        payload["weeks_played"] = self.weeks_played
        return payload
