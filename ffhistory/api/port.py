"""Async season-data port and its Sleeper implementation.

The history services only see ``SeasonDataPort``. ``SleeperSeasonData`` runs the
blocking ``SleeperClient`` on worker threads so independent fetches (different
seasons, different weeks) can be awaited together with ``asyncio.gather``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from ffhistory.config import HistoryConfig
from ffhistory.constants import DEFAULT_FETCH_TIMEOUT_SEC
from ffhistory.errors import NetworkFailure, NotFound
from ffhistory.models import LeagueSeason, Roster, User, WeeklyMatchup

from .client import SleeperClient


class SeasonDataPort(Protocol):
    """Fetch-by-id operations consumed by the history engine.

    Every method raises ``UpstreamFetchFailure`` (``NotFound`` / ``NetworkFailure``)
    on a non-success upstream response.
    """

    async def get_league_info(self, season_id: str) -> LeagueSeason: ...
    async def get_league_users(self, season_id: str) -> list[User]: ...
    async def get_league_rosters(self, season_id: str) -> list[Roster]: ...
    async def get_league_matchups(self, season_id: str, week: int) -> list[WeeklyMatchup]: ...
    async def get_user_leagues(self, owner_id: str, season: str) -> list[LeagueSeason]: ...


def _rows(payload: Any) -> list[dict]:
    if not isinstance(payload, list):
        return []
    return [p for p in payload if isinstance(p, dict)]


class SleeperSeasonData:
    def __init__(
        self,
        client: SleeperClient,
        *,
        sport: str = "nfl",
        timeout: float = DEFAULT_FETCH_TIMEOUT_SEC,
    ) -> None:
        self.client = client
        self.sport = sport
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: HistoryConfig) -> SleeperSeasonData:
        return cls(
            SleeperClient.from_config(config),
            sport=config.sport,
            timeout=config.fetch_timeout,
        )

    async def _get(self, path: str) -> Any:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.client.get_json, path), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            raise NetworkFailure(f"GET {path} timed out after {self.timeout}s", path=path) from exc

    async def get_league_info(self, season_id: str) -> LeagueSeason:
        path = f"/league/{season_id}"
        payload = await self._get(path)
        # Unknown league ids come back as 200 with a null body
        if not isinstance(payload, dict):
            raise NotFound(f"League {season_id} not found", path=path)
        return LeagueSeason.from_api(payload)

    async def get_league_users(self, season_id: str) -> list[User]:
        payload = await self._get(f"/league/{season_id}/users")
        return [User.from_api(u) for u in _rows(payload)]

    async def get_league_rosters(self, season_id: str) -> list[Roster]:
        payload = await self._get(f"/league/{season_id}/rosters")
        return [Roster.from_api(r) for r in _rows(payload)]

    async def get_league_matchups(self, season_id: str, week: int) -> list[WeeklyMatchup]:
        payload = await self._get(f"/league/{season_id}/matchups/{week}")
        return [WeeklyMatchup.from_api(m, week) for m in _rows(payload)]

    async def get_user_leagues(self, owner_id: str, season: str) -> list[LeagueSeason]:
        payload = await self._get(f"/user/{owner_id}/leagues/{self.sport}/{season}")
        return [LeagueSeason.from_api(lg) for lg in _rows(payload)]
