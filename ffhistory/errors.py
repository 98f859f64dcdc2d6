"""Exception types raised by the upstream port and the history services."""

from __future__ import annotations


class UpstreamFetchFailure(Exception):
    """Non-success response (or transport error) from the league data provider."""

    def __init__(self, message: str, *, path: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.status = status


class NetworkFailure(UpstreamFetchFailure):
    pass


class NotFound(UpstreamFetchFailure):
    pass


class SeasonNotFound(LookupError):
    """Requested season label is not part of the resolved league chain."""

    def __init__(self, season: str, season_id: str) -> None:
        super().__init__(f"Season {season} not found in league chain starting at {season_id}")
        self.season = season
        self.season_id = season_id
