"""Fetch and assemble a full league history (season chain to JSON-ready model)."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable

from ffhistory.api.client import DataSource
from ffhistory.api.models import League, LeagueState, Matchup, Roster
from ffhistory.compute.chain import ChainCache, SeasonChainResolver
from ffhistory.compute.core import pair_week
from ffhistory.compute.ranking import rank_records
from ffhistory.compute.streaks import season_sort_key
from ffhistory.compute.weeks import WeekWindow, compute_week_window
from ffhistory.errors import DataSourceUnavailable, NoLinkedSeasonsFound
from ffhistory.history.aggregate import aggregate_seasons, league_metadata
from ffhistory.history.config import HistoryConfig
from ffhistory.history.models import LeagueHistory
from ffhistory.history.season import SeasonInputs, SeasonResult, analyze_season

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


def check_record_symmetry(league: League, rosters: Iterable[Roster]) -> bool:
    """Every game has one winner and one loser, so season wins must equal losses."""
    rosters = list(rosters)
    wins = sum(r.wins for r in rosters)
    losses = sum(r.losses for r in rosters)
    if wins != losses:
        logger.warning(
            "Season %s (league %s): roster wins %d != losses %d",
            league.season,
            league.league_id,
            wins,
            losses,
        )
        return False
    return True


def _is_unstarted(
    league: League, state: LeagueState | None, weekly_rows: dict[int, list[Matchup]]
) -> bool:
    """True when no week of the season holds a scored, paired game.

    A pre-draft successor league shows up while the league state still
    reports the previous season, so the state only short-circuits the check.
    """
    if state is not None and state.season == league.season:
        if not any(m.scored for m in weekly_rows.get(1, [])):
            return True
    return not any(pair_week(week, rows)[0] for week, rows in weekly_rows.items())


class HistoryBuilder:
    """Orchestrates chain resolution, per-season analysis and aggregation.

    Seasons are processed on a thread pool and joined before the
    chronological fold; weekly matchups of one season are fetched on a
    second pool once the week window is known.
    """

    def __init__(
        self,
        source: DataSource,
        config: HistoryConfig | None = None,
        cache: ChainCache | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.source = source
        self.config = config or HistoryConfig()
        self.resolver = SeasonChainResolver(source, cache)
        self.progress_callback = progress_callback
        self._last_percent = 0

    def _progress(self, percent: int, message: str) -> None:
        percent = max(self._last_percent, min(100, int(percent)))
        self._last_percent = percent
        logger.debug("[%3d%%] %s", percent, message)
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(percent, message)
        except Exception:
            logger.exception("Progress callback failed at %d%%", percent)

    def build(self, league_id: str) -> LeagueHistory:
        self._last_percent = 0
        self._progress(0, f"Resolving season chain for league {league_id}")
        chain = self.resolver.resolve(league_id)
        self._progress(5, f"Found {len(chain)} linked season(s)")

        state = self._current_state()
        results = self._collect_seasons(chain, state)
        if not results:
            raise NoLinkedSeasonsFound(league_id)

        self._progress(90, "Aggregating all-time statistics")
        all_time, season_streak_records = aggregate_seasons(results)
        candidates = [rec for res in results for rec in res.records]
        candidates.extend(season_streak_records)
        history = LeagueHistory(
            league_id=league_id,
            records=rank_records(candidates),
            season_stats={res.season: res.stats() for res in results},
            all_time_stats=all_time,
            league_metadata=league_metadata(results, all_time),
        )
        self._progress(100, f"Processed {len(results)} season(s)")
        return history

    def _current_state(self) -> LeagueState | None:
        try:
            return self.source.get_current_league_state()
        except DataSourceUnavailable as exc:
            logger.warning("Current league state unavailable, not skipping any season: %s", exc)
            return None

    def _collect_seasons(
        self, chain: tuple[str, ...], state: LeagueState | None
    ) -> list[SeasonResult]:
        results: list[SeasonResult] = []
        total = len(chain)
        done = 0
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures = {pool.submit(self.process_season, lid, state): lid for lid in chain}
            for fut in as_completed(futures):
                lid = futures[fut]
                done += 1
                try:
                    res = fut.result()
                except DataSourceUnavailable as exc:
                    logger.warning("Skipping league %s: %s", lid, exc)
                    res = None
                if res is not None:
                    results.append(res)
                # coarse milestones in steps of 5 between 10 and 85
                pct = 10 + int(75 * done / total) // 5 * 5
                self._progress(pct, f"Processed {done}/{total} season(s)")
        results.sort(key=lambda r: season_sort_key(r.season))
        return results

    def _fetch_weeks(self, league_id: str, weeks: range) -> dict[int, list[Matchup]]:
        def fetch(week: int) -> list[Matchup]:
            try:
                return self.source.get_matchups(league_id, week)
            except DataSourceUnavailable as exc:
                logger.warning("League %s week %d unavailable, treating as no games: %s", league_id, week, exc)
                return []

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            return dict(zip(weeks, pool.map(fetch, weeks)))

    def _window(self, league: League) -> WeekWindow:
        return compute_week_window(league, self.config.playoff_round_count_for(league))

    def process_season(self, league_id: str, state: LeagueState | None = None) -> SeasonResult | None:
        """Fetch and analyze one season; ``None`` when it has nothing to contribute.

        Raises DataSourceUnavailable when the league, users or rosters cannot
        be fetched.
        """
        league = self.source.get_league_info(league_id)
        if league is None:
            logger.warning("League %s not found, skipping", league_id)
            return None
        window = self._window(league)
        rosters = tuple(self.source.get_rosters(league_id))
        if not rosters:
            logger.warning("Season %s (league %s) has no rosters, skipping", league.season, league_id)
            return None
        users = tuple(self.source.get_users(league_id))

        last_week = max(window.total_weeks, window.championship_week_end)
        weekly_rows = self._fetch_weeks(league_id, range(1, last_week + 1))
        if _is_unstarted(league, state, weekly_rows):
            logger.info("Season %s (league %s) has no scored games yet, skipping", league.season, league_id)
            return None

        try:
            bracket = self.source.get_playoff_bracket(league_id)
        except DataSourceUnavailable as exc:
            logger.warning("Season %s bracket unavailable: %s", league.season, exc)
            bracket = None

        check_record_symmetry(league, rosters)
        return analyze_season(
            SeasonInputs(
                league=league,
                users=users,
                rosters=rosters,
                weekly_rows=weekly_rows,
                bracket=tuple(bracket) if bracket else None,
            ),
            window,
        )


def build_league_history(
    league_id: str,
    source: DataSource | None = None,
    config: HistoryConfig | None = None,
    progress_callback: ProgressCallback | None = None,
    cache: ChainCache | None = None,
) -> LeagueHistory:
    """Main entry point: full history for the league chain containing ``league_id``.

    Raises NoLinkedSeasonsFound when no season produced data.
    """
    config = config or HistoryConfig.from_env()
    source = source or config.make_data_source()
    builder = HistoryBuilder(source, config, cache=cache, progress_callback=progress_callback)
    return builder.build(league_id)
