"""Regular-season and playoff week bounds for one league season."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ffhistory.api.models import League
from ffhistory.constants import DEFAULT_PLAYOFF_ROUND_COUNT, DEFAULT_PLAYOFF_WEEK_START

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WeekWindow:
    playoff_week_start: int
    playoff_round_count: int
    championship_week_start: int
    championship_week_end: int
    round_count_configured: bool = True

    @property
    def regular_season_weeks(self) -> int:
        return self.playoff_week_start - 1

    @property
    def total_weeks(self) -> int:
        return self.playoff_week_start + self.playoff_round_count - 1

    @property
    def playoff_week_end(self) -> int:
        return self.total_weeks

    def is_playoff(self, week: int) -> bool:
        return week >= self.playoff_week_start

    def late_season_weeks(self, span: int) -> range:
        """The final ``span`` regular-season weeks."""
        first = max(1, self.regular_season_weeks - span + 1)
        return range(first, self.regular_season_weeks + 1)


def compute_week_window(league: League, playoff_round_count: int | None = None) -> WeekWindow:
    """Derive the week window from league settings.

    ``playoff_round_count`` is the number of scoring weeks in the playoffs and
    should come from configuration; when it is missing the default (one round
    plus a two-week championship) is applied and logged.
    """
    settings = league.settings
    pws = settings.playoff_week_start or DEFAULT_PLAYOFF_WEEK_START
    configured = playoff_round_count is not None and playoff_round_count > 0
    rounds = int(playoff_round_count) if configured else DEFAULT_PLAYOFF_ROUND_COUNT
    if not configured:
        logger.info(
            "League %s (%s): no playoff round count configured, assuming %d playoff weeks",
            league.league_id,
            league.season,
            rounds,
        )
    total = pws + rounds - 1
    champ_start = settings.championship_week_start or total
    champ_end = settings.championship_week_end or max(champ_start, total)
    return WeekWindow(
        playoff_week_start=pws,
        playoff_round_count=rounds,
        championship_week_start=champ_start,
        championship_week_end=champ_end,
        round_count_configured=configured,
    )
