import asyncio
import math

import pytest

from ffhistory.config import ChampionshipRule, FinishRule
from ffhistory.errors import NetworkFailure
from ffhistory.history import LeagueChainResolver, StatsAggregator

from tests.fakes import game, league, roster, user


def _aggregator(port, **kw):
    return StatsAggregator(port, LeagueChainResolver(port), **kw)


def _by_user(stats):
    return {s.user_id: s for s in stats}


def test_three_season_totals(three_season_port):
    stats = asyncio.run(_aggregator(three_season_port).aggregate_user_stats("S3"))
    assert [s.user_id for s in stats] == ["u3", "u2", "u1", "u4"]
    s = _by_user(stats)

    alice = s["u1"]
    assert (alice.wins, alice.losses, alice.ties) == (19, 22, 1)
    assert alice.points_for == 4180.44
    assert alice.points_against == 4300.02
    assert alice.seasons == 3
    assert alice.best_finish == 1
    assert alice.championships == 1
    assert alice.playoff_appearances == 3
    assert math.isclose(alice.win_percentage, 19.5 / 42 * 100)
    assert math.isclose(alice.average_points_per_game, 4180.44 / 42)

    dan = s["u4"]
    assert dan.seasons == 1 and dan.best_finish == 4 and dan.championships == 0
    assert three_season_port.count("matchups") == 0


def test_totals_do_not_depend_on_visit_order(three_season_port):
    agg = _aggregator(three_season_port)
    forward = asyncio.run(agg.run_chain(["S3", "S2", "S1"]))
    backward = asyncio.run(agg.run_chain(["S1", "S2", "S3"]))
    key = lambda s: (  # noqa: E731
        s.wins,
        s.losses,
        s.ties,
        s.points_for_hundredths,
        s.points_against_hundredths,
        s.seasons,
        s.championships,
        s.playoff_appearances,
        s.best_finish,
        s.win_percentage,
    )
    a = {s.user_id: key(s) for s in forward.stats}
    b = {s.user_id: key(s) for s in backward.stats}
    assert a == b


def test_win_percentage_matches_one_shot_computation(three_season_port):
    stats = asyncio.run(_aggregator(three_season_port).aggregate_user_stats("S3"))
    for s in stats:
        games = s.wins + s.losses + s.ties
        assert s.win_percentage == (s.wins + 0.5 * s.ties) / games * 100


def test_zero_playoff_teams_means_no_appearances(port):
    port.add_season(league("A", "2023", playoff_teams=0), [user("u1"), user("u2")], [roster(1, "u1", 5, 5), roster(2, "u2", 5, 5)])
    port.add_season(league("B", "2024", prev="A", playoff_teams=0), [user("u1"), user("u2")], [roster(1, "u2", 5, 5), roster(2, "u1", 5, 5)])
    stats = asyncio.run(_aggregator(port).aggregate_user_stats("B"))
    assert len(stats) == 2
    assert all(s.playoff_appearances == 0 for s in stats)


def test_season_fetch_failure_aborts_aggregation(three_season_port):
    three_season_port.fail.add(("rosters", "S2"))
    with pytest.raises(NetworkFailure):
        asyncio.run(_aggregator(three_season_port).aggregate_user_stats("S3"))


def test_orphans_are_skipped_and_reported(three_season_port):
    port = three_season_port
    port.rosters["S1"].append(roster(4, None, 3, 11))
    port.users["S1"].append(user("u9", "nobody"))
    report = asyncio.run(_aggregator(port).run("S3"))
    assert report.skipped_rosters == {"S1": [4]}
    assert report.skipped_users == {"S1": ["u9"]}
    assert report.skipped_count == 2
    assert "u9" not in _by_user(report.stats)
    assert report.season_ids == ["S3", "S2", "S1"]


def test_final_week_championship_rule(port):
    port.add_season(
        league("A", "2024", playoff_week_start=2),
        [user("u1"), user("u2")],
        [roster(1, "u1", 1, 1), roster(2, "u2", 1, 1)],
    )
    port.matchups[("A", 1)] = [game(1, 1, 1, 100.0), game(1, 1, 2, 90.0)]
    port.matchups[("A", 3)] = [game(3, 1, 1, 101.0), game(3, 1, 2, 115.5)]
    stats = asyncio.run(
        _aggregator(port, championship_rule=ChampionshipRule.FINAL_WEEK).aggregate_user_stats("A")
    )
    s = _by_user(stats)
    assert s["u2"].championships == 1
    assert s["u1"].championships == 0
    # playoff start 2 -> weeks 1..4
    assert port.count("matchups") == 4


def test_rank_finish_rule(port):
    port.add_season(
        league("A", "2024", playoff_teams=2),
        [user("u1"), user("u2"), user("u3")],
        [roster(1, "u1", 2, 8, rank=3), roster(2, "u2", 8, 2, rank=1), roster(3, "u3", 5, 5)],
    )
    stats = asyncio.run(_aggregator(port, finish_rule=FinishRule.RANK).aggregate_user_stats("A"))
    s = _by_user(stats)
    assert (s["u1"].best_finish, s["u1"].playoff_appearances) == (3, 0)
    assert (s["u2"].best_finish, s["u2"].playoff_appearances) == (1, 1)
    assert (s["u3"].best_finish, s["u3"].playoff_appearances) == (None, 0)
    # legacy championship rule still keys on roster id 1
    assert s["u1"].championships == 1
