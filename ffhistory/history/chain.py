"""Discovery of the linked league records that make up a league's history.

Each season's league record points at its predecessor (``previous_league_id``).
Walking those links backward is strictly sequential: a season's predecessor is
unknown until its own record has been fetched. Successor seasons carry no back
reference to us, so the forward pass searches the league owner's listing for the
next season label instead.

Traversal is best effort. A failed fetch ends the walk in that direction only,
and a visited set plus a depth bound guarantee termination on cyclic or runaway
chains.
"""

from __future__ import annotations

import asyncio
import logging

from ffhistory.api.port import SeasonDataPort
from ffhistory.constants import DEFAULT_MAX_CHAIN_DEPTH
from ffhistory.errors import UpstreamFetchFailure
from ffhistory.models import LeagueSeason

logger = logging.getLogger(__name__)

ChainLink = tuple[str, str]  # (league_id, season label)


class ChainCache:
    """Resolved chains keyed by starting league id.

    Lifetime is whatever owns the instance (one per ``HistoryService`` by
    default). Entries are never evicted. Concurrent first resolutions of the same
    key share one walk through a per-key lock.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[ChainLink, ...]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> list[ChainLink] | None:
        links = self._entries.get(key)
        return list(links) if links is not None else None

    def put(self, key: str, links: list[ChainLink]) -> None:
        self._entries[key] = tuple(links)

    def lock(self, key: str) -> asyncio.Lock:
        return self._locks.setdefault(key, asyncio.Lock())

    def release(self, key: str) -> None:
        lk = self._locks.get(key)
        if lk is not None and not lk.locked():
            del self._locks[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _sort_key(link: ChainLink) -> tuple[int, str]:
    league_id, season = link
    try:
        year = int(season)
    except ValueError:
        year = -1
    return (year, league_id)


class LeagueChainResolver:
    def __init__(
        self,
        port: SeasonDataPort,
        cache: ChainCache | None = None,
        *,
        max_depth: int = DEFAULT_MAX_CHAIN_DEPTH,
    ) -> None:
        self.port = port
        self.cache = cache if cache is not None else ChainCache()
        self.max_depth = max(0, max_depth)

    async def resolve_chain(self, season_id: str) -> list[str]:
        """League ids linked to ``season_id``, most recent season first."""
        return [league_id for league_id, _ in await self.resolve_links(season_id)]

    async def resolve_links(self, season_id: str) -> list[ChainLink]:
        cached = self.cache.get(season_id)
        if cached is not None:
            return cached
        try:
            async with self.cache.lock(season_id):
                cached = self.cache.get(season_id)
                if cached is not None:
                    return cached
                seasons: dict[str, str] = {season_id: ""}
                start = await self._walk_backward(season_id, seasons)
                if start is not None:
                    await self._walk_forward(season_id, start, seasons)
                links = sorted(seasons.items(), key=_sort_key, reverse=True)
                self.cache.put(season_id, links)
        finally:
            self.cache.release(season_id)
        logger.debug("resolved chain for %s: %s", season_id, links)
        return links

    async def _walk_backward(self, season_id: str, seasons: dict[str, str]) -> LeagueSeason | None:
        start: LeagueSeason | None = None
        current = season_id
        depth = 0
        while True:
            try:
                league = await self.port.get_league_info(current)
            except UpstreamFetchFailure as exc:
                logger.warning("backward walk stopped at %s: %s", current, exc)
                if current != season_id:
                    # Unverified link: keep the chain ending at the referencing season
                    del seasons[current]
                break
            if start is None:
                start = league
            seasons[current] = league.season
            prev = league.previous_league_id
            if not prev:
                logger.debug("backward walk ended at %s: no predecessor", current)
                break
            if prev in seasons:
                logger.warning("backward walk ended at %s: cycle back to %s", current, prev)
                break
            if depth >= self.max_depth:
                logger.warning("backward walk ended at %s: depth limit %d", current, self.max_depth)
                break
            depth += 1
            seasons[prev] = ""
            current = prev
        return start

    async def _walk_forward(self, season_id: str, start: LeagueSeason, seasons: dict[str, str]) -> None:
        try:
            users = await self.port.get_league_users(season_id)
        except UpstreamFetchFailure as exc:
            logger.warning("forward walk skipped for %s: %s", season_id, exc)
            return
        owner = next((u for u in users if u.is_owner), None)
        if owner is None:
            logger.debug("forward walk skipped for %s: no league owner", season_id)
            return

        current, label = season_id, start.season
        for _ in range(self.max_depth):
            try:
                next_season = str(int(label) + 1)
            except ValueError:
                logger.debug("forward walk ended at %s: season label %r", current, label)
                return
            try:
                leagues = await self.port.get_user_leagues(owner.user_id, next_season)
            except UpstreamFetchFailure as exc:
                logger.warning("forward walk stopped at %s: %s", current, exc)
                return
            nxt = next((lg for lg in leagues if lg.previous_league_id == current), None)
            if nxt is None:
                logger.debug("forward walk ended at %s: no successor in %s", current, next_season)
                return
            if nxt.league_id in seasons:
                logger.warning("forward walk ended at %s: cycle to %s", current, nxt.league_id)
                return
            seasons[nxt.league_id] = nxt.season or next_season
            current, label = nxt.league_id, seasons[nxt.league_id]
        logger.warning("forward walk ended at %s: depth limit %d", current, self.max_depth)
