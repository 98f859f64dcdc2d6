from . import consistency, core, metrics

join_users_rosters = core.join_users_rosters
group_rows = core.group_rows
opponents_by_week = core.opponents_by_week
league_weeks = core.league_weeks
format_record = core.format_record
final_week_winners = core.final_week_winners
is_scored = core.is_scored
scored = core.scored
calculate_consistency_score = consistency.calculate_consistency_score
series_consistency_score = consistency.series_consistency_score
weekly_std_dev = consistency.weekly_std_dev
compute_season_metrics = metrics.compute_season_metrics
merge_team_metrics = metrics.merge_team_metrics

__all__ = [
    "join_users_rosters",
    "group_rows",
    "opponents_by_week",
    "league_weeks",
    "format_record",
    "final_week_winners",
    "is_scored",
    "scored",
    "calculate_consistency_score",
    "series_consistency_score",
    "weekly_std_dev",
    "compute_season_metrics",
    "merge_team_metrics",
]
