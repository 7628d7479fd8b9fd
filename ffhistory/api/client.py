"""HTTP client, rate limiter and data-source adapter for the Sleeper API.

This module centralizes HTTP concerns:
- Simple monotonically-timed rate limiting (min interval between calls)
- Resilient requests.Session with retries and backoff for transient errors
- A small adapter that turns Sleeper payloads into the immutable models the
  history engine consumes, translating transport failures into
  ``DataSourceUnavailable``

The engine itself never retries or times out; everything network related
lives here.
"""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ffhistory.api.models import BracketMatch, League, LeagueState, Matchup, Roster, User
from ffhistory.constants import DEFAULT_MIN_INTERVAL_SEC
from ffhistory.errors import DataSourceUnavailable

BASE_URL = "https://api.sleeper.app/v1"


class RateLimiter:
    """Wall-clock based rate limiter using a minimum interval between calls.

    Safe to share between the worker threads of one run: ``wait()`` holds a
    lock so at least ``min_interval_sec`` seconds elapse between consecutive
    calls regardless of the calling thread.
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

    Environment variables can flow in via parameters:
    - base_url: defaults to https://api.sleeper.app/v1
    - rpm_limit: translated to a minimum interval of 60 / rpm seconds
    - min_interval_ms: explicit minimum interval in milliseconds (wins if larger)

    Only GET + JSON is implemented because history generation only needs reads.
    """

    def __init__(
        self,
        base_url: str | None = None,
        rpm_limit: float | None = None,
        min_interval_ms: float | None = None,
        timeout: float = 20,
    ) -> None:
        self.base_url = (base_url or os.environ.get("SLEEPER_BASE_URL", BASE_URL)).rstrip("/")
        self.timeout = timeout
        min_interval = None
        if rpm_limit and rpm_limit > 0:
            min_interval = max(min_interval or 0.0, 60.0 / rpm_limit)
        if min_interval_ms and min_interval_ms > 0:
            ms = float(min_interval_ms) / 1000.0
            min_interval = max(min_interval or 0.0, ms)
        self.rate = RateLimiter(min_interval)

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "ff-league-history/2.0"})
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

    def get_json(self, path: str, *, allow_404: bool = False) -> Any:
        """GET ``base_url + path`` and return decoded JSON.

        Raises requests.HTTPError on non-2xx responses (after retries). With
        ``allow_404`` a 404 returns ``None`` instead. A timeout is applied per
        request to avoid indefinite hangs.
        """
        self.rate.wait()
        r = self.session.get(self.base_url + path, timeout=self.timeout)
        if allow_404 and r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()


class DataSource(Protocol):
    """Read-only league data consumed by the history engine."""

    def get_league_info(self, league_id: str) -> League | None: ...
    def get_users(self, league_id: str) -> list[User]: ...
    def get_rosters(self, league_id: str) -> list[Roster]: ...
    def get_matchups(self, league_id: str, week: int) -> list[Matchup]: ...
    def get_playoff_bracket(self, league_id: str) -> list[BracketMatch] | None: ...
    def get_current_league_state(self) -> LeagueState: ...
    def get_user_leagues(self, user_id: str, season: str) -> list[League]: ...


class SleeperDataSource:
    """``DataSource`` backed by the public Sleeper read API."""

    def __init__(self, client: SleeperClient | None = None, sport: str = "nfl") -> None:
        self.client = client or SleeperClient()
        self.sport = sport

    def _fetch(self, resource: str, path: str, *, allow_404: bool = False) -> Any:
        try:
            return self.client.get_json(path, allow_404=allow_404)
        except (requests.RequestException, ValueError) as exc:
            raise DataSourceUnavailable(resource, exc) from exc

    def get_league_info(self, league_id: str) -> League | None:
        payload = self._fetch(f"league {league_id}", f"/league/{league_id}", allow_404=True)
        if not payload:
            return None
        return League.from_api(payload)

    def get_users(self, league_id: str) -> list[User]:
        payload = self._fetch(f"users of league {league_id}", f"/league/{league_id}/users")
        return [User.from_api(u) for u in payload or [] if u.get("user_id")]

    def get_rosters(self, league_id: str) -> list[Roster]:
        payload = self._fetch(f"rosters of league {league_id}", f"/league/{league_id}/rosters")
        return [Roster.from_api(r) for r in payload or []]

    def get_matchups(self, league_id: str, week: int) -> list[Matchup]:
        payload = self._fetch(
            f"week {week} of league {league_id}", f"/league/{league_id}/matchups/{week}"
        )
        return [Matchup.from_api(m) for m in payload or []]

    def get_playoff_bracket(self, league_id: str) -> list[BracketMatch] | None:
        payload = self._fetch(
            f"winners bracket of league {league_id}",
            f"/league/{league_id}/winners_bracket",
            allow_404=True,
        )
        if not payload:
            return None
        return [BracketMatch.from_api(m) for m in payload if isinstance(m, dict)]

    def get_current_league_state(self) -> LeagueState:
        payload = self._fetch(f"{self.sport} state", f"/state/{self.sport}")
        return LeagueState.from_api(payload or {})

    def get_user_leagues(self, user_id: str, season: str) -> list[League]:
        payload = self._fetch(
            f"{season} leagues of user {user_id}",
            f"/user/{user_id}/leagues/{self.sport}/{season}",
            allow_404=True,
        )
        return [League.from_api(lg) for lg in payload or [] if isinstance(lg, dict)]
