"""Season chain discovery.

A persistent Sleeper league is a new league id every year; each one points
back to its predecessor through ``previous_league_id``. The resolver walks
those backlinks from a seed id, probes for at most one successor season and
returns the ids oldest first.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ffhistory.api.client import DataSource
from ffhistory.api.models import League
from ffhistory.compute.streaks import season_sort_key
from ffhistory.errors import DataSourceUnavailable

logger = logging.getLogger(__name__)


class ChainCache:
    """Populate-once cache of resolved chains keyed by seed league id."""

    def __init__(self) -> None:
        self._chains: dict[str, tuple[str, ...]] = {}
        self._lock = threading.Lock()

    def get_or_resolve(
        self, seed_league_id: str, resolve: Callable[[str], tuple[str, ...]]
    ) -> tuple[str, ...]:
        """Return the cached chain, resolving outside the lock on a miss.

        Concurrent misses for one seed may both resolve; the first stored
        chain is the one every caller gets back.
        """
        with self._lock:
            cached = self._chains.get(seed_league_id)
        if cached is not None:
            return cached
        chain = tuple(resolve(seed_league_id))
        with self._lock:
            return self._chains.setdefault(seed_league_id, chain)

    def __contains__(self, seed_league_id: object) -> bool:
        return seed_league_id in self._chains

    def __len__(self) -> int:
        return len(self._chains)


def _safe_league(source: DataSource, league_id: str) -> League | None:
    try:
        return source.get_league_info(league_id)
    except DataSourceUnavailable as exc:
        logger.warning("Skipping league %s: %s", league_id, exc)
        return None


def _probe_next_season(source: DataSource, seed: League, visited: set[str]) -> League | None:
    if not seed.season.isdigit():
        return None
    next_season = str(int(seed.season) + 1)
    try:
        owner = next((u for u in source.get_users(seed.league_id) if u.is_owner), None)
        if owner is None:
            return None
        candidates = source.get_user_leagues(owner.user_id, next_season)
    except DataSourceUnavailable as exc:
        logger.warning("Could not probe %s season after league %s: %s", next_season, seed.league_id, exc)
        return None
    for league in candidates:
        if league.previous_league_id == seed.league_id and league.league_id not in visited:
            return league
    return None


def _order_chain(backward: list[League], successor: League | None) -> tuple[str, ...]:
    """Order the traversal oldest first, one id per season label.

    ``backward`` starts at the seed and walks back in time. Links give the
    chronological position, which breaks ties between labels that do not
    sort on their own. When two leagues claim the same label the one nearest
    the seed wins; empty labels are never merged.
    """
    # (distance from seed, chronological position, league)
    found = [(dist, -dist, league) for dist, league in enumerate(backward)]
    if successor is not None:
        found.append((1, 1, successor))
    found.sort(key=lambda e: e[0])

    kept: list[tuple[int, League]] = []
    labels: set[str] = set()
    for _, position, league in found:
        if league.season:
            if league.season in labels:
                continue
            labels.add(league.season)
        kept.append((position, league))
    kept.sort(key=lambda e: (season_sort_key(e[1].season), e[0]))
    return tuple(lg.league_id for _, lg in kept)


def resolve_season_chain(source: DataSource, seed_league_id: str) -> tuple[str, ...]:
    """Return linked league ids, oldest season first.

    Unreachable hops end the backward walk instead of failing the chain; an
    unreachable seed yields just the seed id so the caller can decide whether
    anything is left to analyze.
    """
    seed = _safe_league(source, seed_league_id)
    if seed is None:
        return (seed_league_id,)

    visited = {seed.league_id}
    # Newest-first order: [seed, previous, previous-of-previous, ...]
    chain: list[League] = [seed]
    current = seed
    while current.previous_league_id and current.previous_league_id not in visited:
        prev_id = current.previous_league_id
        visited.add(prev_id)
        prev = _safe_league(source, prev_id)
        if prev is None:
            break
        chain.append(prev)
        current = prev

    successor = _probe_next_season(source, seed, visited)
    ordered = _order_chain(chain, successor)
    logger.info("League %s chain: %s", seed_league_id, ", ".join(ordered))
    return ordered


class SeasonChainResolver:
    def __init__(self, source: DataSource, cache: ChainCache | None = None) -> None:
        self.source = source
        self.cache = cache if cache is not None else ChainCache()

    def resolve(self, seed_league_id: str) -> tuple[str, ...]:
        return self.cache.get_or_resolve(
            seed_league_id, lambda seed: resolve_season_chain(self.source, seed)
        )
