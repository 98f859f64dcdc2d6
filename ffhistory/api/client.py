"""HTTP client and rate limiter for the Sleeper API.

This module centralizes HTTP concerns:
- Simple monotonically-timed rate limiting (min interval between calls)
- Resilient requests.Session with retries and backoff for transient errors
- A tiny JSON helper bound to the configured base URL that maps failures onto
  the ``ffhistory.errors`` hierarchy
"""

from __future__ import annotations

import threading
import time
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ffhistory.config import HistoryConfig
from ffhistory.constants import DEFAULT_FETCH_TIMEOUT_SEC, DEFAULT_MIN_INTERVAL_SEC
from ffhistory.errors import NetworkFailure, NotFound


class RateLimiter:
    """Wall-clock based rate limiter using a minimum interval between calls.

    Fetches run on worker threads, so ``wait()`` serializes on a lock; at least
    ``min_interval_sec`` seconds elapse between consecutive calls.
    """

    def __init__(self, min_interval_sec: float | None = None) -> None:
        self.min_interval = (
            float(min_interval_sec) if min_interval_sec else DEFAULT_MIN_INTERVAL_SEC
        )
        self._last = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            now = time.monotonic()
            if self._last:
                elapsed = now - self._last
                if elapsed < self.min_interval:
                    time.sleep(self.min_interval - elapsed)
            self._last = time.monotonic()


class SleeperClient:
    """Thin wrapper around requests.Session for the Sleeper API.

    - base_url: defaults to https://api.sleeper.com/v1
    - rpm_limit: translated to a minimum interval of 60 / rpm seconds
    - min_interval_ms: explicit minimum interval in milliseconds (wins if larger)

    Only GET + JSON is implemented; the history engine only reads.
    """

    def __init__(
        self,
        base_url: str = "https://api.sleeper.com/v1",
        rpm_limit: float | None = None,
        min_interval_ms: float | None = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SEC,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        min_interval = None
        if rpm_limit and rpm_limit > 0:
            min_interval = max(min_interval or 0.0, 60.0 / rpm_limit)
        if min_interval_ms and min_interval_ms > 0:
            ms = float(min_interval_ms) / 1000.0
            min_interval = max(min_interval or 0.0, ms)
        self.rate = RateLimiter(min_interval)

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "ffhistory/1.0"})
        # Configure safe-idempotent retries for transient errors
        retry = Retry(
            total=5,
            connect=3,
            read=3,
            backoff_factor=0.5,
            status_forcelist=(408, 429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def from_config(cls, config: HistoryConfig) -> SleeperClient:
        return cls(
            config.base_url,
            rpm_limit=config.rpm_limit,
            min_interval_ms=config.min_interval_ms,
            timeout=config.fetch_timeout,
        )

    def get_json(self, path: str) -> Any:
        """GET ``base_url + path`` and return decoded JSON.

        Raises ``NotFound`` on 404 and ``NetworkFailure`` on any other non-2xx
        status (after retries) or transport error.
        """
        if not path.startswith("/"):
            path = "/" + path
        url = self.base_url + path
        self.rate.wait()
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkFailure(f"GET {url} failed: {exc}", path=path) from exc
        if r.status_code == 404:
            raise NotFound(f"GET {url} returned 404", path=path, status=404)
        try:
            r.raise_for_status()
        except requests.HTTPError as exc:
            raise NetworkFailure(
                f"GET {url} failed: {r.status_code}", path=path, status=r.status_code
            ) from exc
        try:
            return r.json()
        except ValueError as exc:
            raise NetworkFailure(f"GET {url} returned invalid JSON", path=path, status=r.status_code) from exc

    def close(self) -> None:
        self.session.close()
