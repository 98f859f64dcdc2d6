from .client import RateLimiter, SleeperClient
from .port import SeasonDataPort, SleeperSeasonData

__all__ = ["RateLimiter", "SleeperClient", "SeasonDataPort", "SleeperSeasonData"]
