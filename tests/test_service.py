import asyncio

import pytest

from ffhistory.config import HistoryConfig
from ffhistory.errors import SeasonNotFound
from ffhistory.history import HistoryService

from tests.fakes import game


@pytest.fixture
def scored_port(three_season_port):
    port = three_season_port
    port.matchups[("S2", 1)] = [game(1, 1, 1, 120.0), game(1, 1, 2, 118.0), game(1, None, 3, 90.0)]
    port.matchups[("S3", 1)] = [
        game(1, 1, 1, 130.0),
        game(1, 1, 2, 100.0),
        game(1, 2, 3, 110.0),
        game(1, 2, 4, 105.0),
    ]
    return port


def test_resolve_and_labels(three_season_port):
    svc = HistoryService(three_season_port)
    assert asyncio.run(svc.resolve_season_chain("S3")) == ["S3", "S2", "S1"]
    assert asyncio.run(svc.season_labels("S3")) == ["2024", "2023", "2022"]
    assert asyncio.run(svc.league_id_for_season("S3", "2023")) == "S2"


def test_unknown_season_raises(three_season_port):
    svc = HistoryService(three_season_port)
    with pytest.raises(SeasonNotFound):
        asyncio.run(svc.league_id_for_season("S3", "1999"))
    with pytest.raises(SeasonNotFound):
        asyncio.run(svc.get_team_metrics("S3", "1999"))


def test_single_season_metrics(scored_port):
    svc = HistoryService(scored_port)
    metrics = asyncio.run(svc.get_team_metrics("S3", "2023"))
    by_user = {m.user_id: m for m in metrics}
    assert set(by_user) == {"u1", "u2", "u3"}
    bob = by_user["u2"]
    assert (bob.record.wins, bob.record.losses, bob.record.ties) == (9, 4, 1)
    assert (bob.clutch.close_games, bob.clutch.close_wins) == (1, 1)
    # a bye has no opponent, so it is never close
    assert by_user["u1"].clutch.close_games == 0
    # playoff_week_start 15 -> 17 weeks requested
    assert scored_port.count("matchups") == 17


def test_all_time_metrics_merge_chain(scored_port):
    svc = HistoryService(scored_port)
    metrics = asyncio.run(svc.get_team_metrics("S3"))
    assert [m.user_id for m in metrics] == ["u3", "u2", "u1", "u4"]
    by_user = {m.user_id: m for m in metrics}
    alice = by_user["u1"]
    assert (alice.record.wins, alice.record.losses, alice.record.ties) == (19, 22, 1)
    assert (alice.points.high, alice.points.low, alice.points.average) == (100.0, 90.0, 95.0)
    assert alice.weeks_played == 2
    assert by_user["u2"].clutch.score == 100.0
    assert scored_port.count("matchups") == 3 * 17


def test_aggregate_user_stats_via_service(three_season_port):
    svc = HistoryService(three_season_port)
    stats = asyncio.run(svc.aggregate_user_stats("S3"))
    assert [s.user_id for s in stats] == ["u3", "u2", "u1", "u4"]


def test_service_shares_chain_cache(three_season_port):
    svc = HistoryService(three_season_port)
    asyncio.run(svc.aggregate_user_stats("S3"))
    before = three_season_port.count("user_leagues")
    asyncio.run(svc.get_team_metrics("S3", "2024"))
    assert three_season_port.count("user_leagues") == before


def test_from_config_uses_given_port(three_season_port):
    svc = HistoryService.from_config(HistoryConfig(max_chain_depth=1), port=three_season_port)
    assert asyncio.run(svc.resolve_season_chain("S3")) == ["S3", "S2"]
