from __future__ import annotations

import pytest

from tests.fakes import FakeSeasonData, league, roster, user


@pytest.fixture
def port() -> FakeSeasonData:
    return FakeSeasonData()


@pytest.fixture
def three_season_port(port: FakeSeasonData) -> FakeSeasonData:
    """S3 -> S2 -> S1 with the same three managers; u4 joins in S3."""
    port.add_season(
        league("S1", "2022"),
        [user("u1", "alice", owner=True), user("u2", "bob"), user("u3", "cara")],
        [
            roster(1, "u1", 10, 4, 0, 150012, 140000),
            roster(2, "u2", 7, 7, 0, 140050, 141000),
            roster(3, "u3", 4, 10, 0, 130000, 139062),
        ],
    )
    port.add_season(
        league("S2", "2023", prev="S1"),
        [user("u1", "alice", owner=True), user("u2", "bob"), user("u3", "cara")],
        [
            roster(1, "u2", 9, 4, 1, 151099, 139001),
            roster(2, "u3", 8, 6, 0, 145025, 142075),
            roster(3, "u1", 3, 10, 1, 128033, 150001),
        ],
    )
    port.add_season(
        league("S3", "2024", prev="S2"),
        [user("u1", "alice", owner=True), user("u2", "bob"), user("u3", "cara"), user("u4", "dan")],
        [
            roster(1, "u3", 11, 3, 0, 160000, 130000),
            roster(2, "u1", 6, 8, 0, 139999, 140001),
            roster(3, "u2", 5, 9, 0, 133333, 150000),
            roster(4, "u4", 6, 8, 0, 135000, 138000),
        ],
    )
    return port
