"""Per-team derived metrics for one season, and their all-time merge.

Single-season and all-time figures go through the same ``_finalize`` step so that
percentages are always recomputed from raw counts (never averaged across seasons).
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Sequence
from dataclasses import dataclass, field

from ffhistory.constants import EXPLOSIVE_FACTOR, NAIL_BITER_MARGIN, POINTS_PLACES
from ffhistory.models import (
    ClutchBlock,
    ConsistencyBlock,
    ExplosivenessBlock,
    PointsBlock,
    RecordBlock,
    Roster,
    TeamMetrics,
    User,
    WeeklyMatchup,
    win_percentage,
)

from .consistency import calculate_consistency_score, weekly_std_dev
from .core import is_scored, join_users_rosters, opponents_by_week, scored

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MetricsReport:
    metrics: list[TeamMetrics] = field(default_factory=list)
    league_average: float = 0.0
    scored_games: int = 0
    skipped_roster_ids: list[int] = field(default_factory=list)
    skipped_user_ids: list[str] = field(default_factory=list)


def _finalize(m: TeamMetrics, league_average: float) -> None:
    rec = m.record
    rec.win_pct = win_percentage(rec.wins, rec.losses, rec.ties)

    scores = m.weekly_scores
    pts = m.points
    pts.total = round(pts.total, POINTS_PLACES)
    pts.average = statistics.fmean(scores) if scores else 0.0
    pts.high = max(scores) if scores else 0.0
    pts.low = min(scores) if scores else 0.0
    pts.std_dev = weekly_std_dev(scores)

    m.consistency.score = calculate_consistency_score(pts.average, pts.high, pts.low)
    m.consistency.average_margin = pts.average - league_average if scores else 0.0

    weeks = len(scores)
    m.explosiveness.score = m.explosiveness.explosive_games / weeks * 100 if weeks else 0.0
    m.clutch.score = m.clutch.close_wins / max(m.clutch.close_games, 1) * 100


def _sort(metrics: list[TeamMetrics]) -> list[TeamMetrics]:
    return sorted(metrics, key=lambda m: -m.record.win_pct)


def compute_season_metrics(
    users: Sequence[User],
    rosters: Sequence[Roster],
    weekly: Sequence[Sequence[WeeklyMatchup]],
) -> MetricsReport:
    """Derive ``TeamMetrics`` for every user/roster pair of one season.

    ``weekly`` holds one list of matchup rows per fetched week. Rows without
    points, or with 0 points (week not played yet), are ignored for every figure.
    """
    rows = scored(weekly)
    league_average = statistics.fmean(m.points for m in rows) if rows else 0.0
    threshold = league_average * EXPLOSIVE_FACTOR
    opponents = opponents_by_week(weekly)

    by_roster: dict[int, list[WeeklyMatchup]] = {}
    for m in rows:
        by_roster.setdefault(m.roster_id, []).append(m)

    joined = join_users_rosters(users, rosters)
    if joined.skipped:
        logger.warning(
            "metrics join skipped rosters=%s users=%s",
            joined.skipped_roster_ids,
            joined.skipped_user_ids,
        )

    metrics: list[TeamMetrics] = []
    for user, roster in joined.pairs:
        games = sorted(by_roster.get(roster.roster_id, []), key=lambda m: m.week)
        close_games = close_wins = 0
        for g in games:
            opp = opponents.get((g.week, g.roster_id))
            if opp is None or not is_scored(opp):
                continue
            if abs(g.points - opp.points) < NAIL_BITER_MARGIN:
                close_games += 1
                if g.points > opp.points:
                    close_wins += 1
        scores = [g.points for g in games]
        metric = TeamMetrics(
            user_id=user.user_id,
            username=user.display_name,
            avatar=user.avatar,
            team_name=user.label,
            record=RecordBlock(wins=roster.wins, losses=roster.losses, ties=roster.ties),
            points=PointsBlock(total=roster.points_for),
            consistency=ConsistencyBlock(),
            explosiveness=ExplosivenessBlock(explosive_games=sum(1 for s in scores if s > threshold)),
            clutch=ClutchBlock(close_wins=close_wins, close_games=close_games),
            weekly_scores=scores,
        )
        _finalize(metric, league_average)
        metrics.append(metric)

    return MetricsReport(
        metrics=_sort(metrics),
        league_average=league_average,
        scored_games=len(rows),
        skipped_roster_ids=joined.skipped_roster_ids,
        skipped_user_ids=joined.skipped_user_ids,
    )


def merge_team_metrics(reports: Sequence[MetricsReport]) -> MetricsReport:
    """Merge per-season reports into all-time figures keyed by user.

    Counts and totals are summed, weekly score series concatenated (so high/low
    are the running max/min), then every percentage is recomputed once. Identity
    fields come from the first report a user appears in; pass reports newest first.
    """
    merged: dict[str, TeamMetrics] = {}
    score_sum = 0.0
    score_count = 0
    out = MetricsReport()
    for rep in reports:
        score_sum += rep.league_average * rep.scored_games
        score_count += rep.scored_games
        out.skipped_roster_ids.extend(rep.skipped_roster_ids)
        out.skipped_user_ids.extend(rep.skipped_user_ids)
        for m in rep.metrics:
            acc = merged.get(m.user_id)
            if acc is None:
                acc = merged[m.user_id] = TeamMetrics(
                    user_id=m.user_id,
                    username=m.username,
                    avatar=m.avatar,
                    team_name=m.team_name,
                )
            acc.record.wins += m.record.wins
            acc.record.losses += m.record.losses
            acc.record.ties += m.record.ties
            acc.points.total += m.points.total
            acc.weekly_scores.extend(m.weekly_scores)
            acc.explosiveness.explosive_games += m.explosiveness.explosive_games
            acc.clutch.close_wins += m.clutch.close_wins
            acc.clutch.close_games += m.clutch.close_games

    out.league_average = score_sum / score_count if score_count else 0.0
    out.scored_games = score_count
    for acc in merged.values():
        _finalize(acc, out.league_average)
    out.metrics = _sort(list(merged.values()))
    return out
