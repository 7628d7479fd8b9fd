"""Head-to-head pairing and game-level records for one season."""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass, field
from typing import Mapping

from ffhistory.api.models import Matchup, User
from ffhistory.compute.core import Game, compute_weekly_results, pair_week
from ffhistory.compute.metrics import ScoreDistribution, WeeklyEntry
from ffhistory.compute.weeks import WeekWindow
from ffhistory.constants import (
    BLOWOUT_MARGIN,
    CLOSE_GAME_MARGIN,
    LATE_SEASON_WEEKS,
    SCORE_CANDIDATES_PER_SEASON,
)
from ffhistory.history.models import Record, RecordType

logger = logging.getLogger(__name__)


def is_blowout(margin: float) -> bool:
    return margin > BLOWOUT_MARGIN


def is_close_game(margin: float) -> bool:
    return 0 < margin < CLOSE_GAME_MARGIN


@dataclass(frozen=True, slots=True)
class SeasonMatchups:
    season: str
    games: tuple[Game, ...]
    records: tuple[Record, ...]
    series: Mapping[int, tuple[WeeklyEntry, ...]]
    distribution: ScoreDistribution
    weekly_results: Mapping[int, list[tuple[int, str]]] = field(default_factory=dict)
    malformed_groups: int = 0

    @property
    def total_games(self) -> int:
        return len(self.games)

    def scores(self) -> list[float]:
        return [p for g in self.games for p in (g.points_a, g.points_b)]

    @property
    def average_score(self) -> float:
        scores = self.scores()
        return round(statistics.fmean(scores), 2) if scores else 0.0

    @property
    def highest_score(self) -> float:
        return max(self.scores(), default=0.0)

    @property
    def lowest_score(self) -> float | None:
        return min(self.scores(), default=None)

    @property
    def closest_game(self) -> float | None:
        margins = [g.margin for g in self.games if not g.tie]
        return min(margins, default=None)

    @property
    def biggest_blowout(self) -> float | None:
        return max((g.margin for g in self.games), default=None)


def _game_records(season: str, game: Game, owners: Mapping[int, User]) -> list[Record]:
    if game.tie:
        return []
    winner = owners.get(game.winner_roster_id)
    loser = owners.get(game.loser_roster_id)
    if winner is None or loser is None:
        return []
    margin = game.margin
    details = {
        "winnerScore": game.winner_points,
        "loserScore": game.loser_points,
        "opponent": loser.display_name,
        "margin": margin,
    }
    out: list[Record] = []
    if is_blowout(margin):
        out.append(
            Record(
                type=RecordType.BLOWOUT,
                season=season,
                week=game.week,
                user_id=winner.user_id,
                username=winner.display_name,
                avatar=winner.avatar,
                value=margin,
                description=(
                    f"{winner.display_name} defeated {loser.display_name} "
                    f"by {margin:.2f} points in Week {game.week}"
                ),
                details=details,
                is_playoff=game.is_playoff,
            )
        )
    elif is_close_game(margin):
        out.append(
            Record(
                type=RecordType.CLOSE_GAME,
                season=season,
                week=game.week,
                user_id=winner.user_id,
                username=winner.display_name,
                avatar=winner.avatar,
                value=margin,
                description=(
                    f"{winner.display_name} narrowly beat {loser.display_name} "
                    f"by {margin:.2f} points in Week {game.week}"
                ),
                details=details,
                is_playoff=game.is_playoff,
            )
        )
    return out


def _score_records(season: str, games: list[Game], owners: Mapping[int, User]) -> list[Record]:
    """Weekly high/low score candidates, regular season and playoffs kept apart."""
    candidates: dict[bool, list[tuple[float, int, User]]] = {False: [], True: []}
    for g in games:
        for rid in g.roster_ids:
            user = owners.get(rid)
            if user is not None:
                candidates[g.is_playoff].append((g.points_of(rid), g.week, user))

    out: list[Record] = []
    for playoff, rows in candidates.items():
        high_type = RecordType.PLAYOFF_HIGH_SCORE if playoff else RecordType.HIGH_SCORE
        low_type = RecordType.PLAYOFF_LOW_SCORE if playoff else RecordType.LOW_SCORE
        suffix = " (Playoffs)" if playoff else ""
        highs = sorted(rows, key=lambda r: (-r[0], r[1]))[:SCORE_CANDIDATES_PER_SEASON]
        lows = sorted(rows, key=lambda r: (r[0], r[1]))[:SCORE_CANDIDATES_PER_SEASON]
        for score, week, user in highs:
            out.append(
                Record(
                    type=high_type,
                    season=season,
                    week=week,
                    user_id=user.user_id,
                    username=user.display_name,
                    avatar=user.avatar,
                    value=score,
                    description=f"{user.display_name} scored {score:.2f} points in Week {week}{suffix}",
                    is_playoff=playoff,
                )
            )
        for score, week, user in lows:
            out.append(
                Record(
                    type=low_type,
                    season=season,
                    week=week,
                    user_id=user.user_id,
                    username=user.display_name,
                    avatar=user.avatar,
                    value=score,
                    description=f"{user.display_name} scored only {score:.2f} points in Week {week}{suffix}",
                    is_playoff=playoff,
                )
            )
    return out


def analyze_season_matchups(
    season: str,
    weekly_rows: Mapping[int, list[Matchup]],
    owners: Mapping[int, User],
    window: WeekWindow,
    playoff_roster_ids: frozenset[int] = frozenset(),
) -> SeasonMatchups:
    """Pair every week of a season into games and derive game records.

    ``owners`` maps roster id to its owning user. ``playoff_roster_ids`` marks
    opponents that qualified for the playoffs (used by the clutch metric).
    Metric series, the score distribution and the W/L/T sequences behind
    game-level streaks cover regular-season games only.
    """
    games: list[Game] = []
    malformed = 0
    for week in sorted(weekly_rows):
        week_games, bad = pair_week(week, weekly_rows[week], window.playoff_week_start)
        games.extend(week_games)
        malformed += bad
    if malformed:
        logger.debug("Season %s: ignored %d unpaired matchup groups", season, malformed)

    records: list[Record] = []
    for g in games:
        records.extend(_game_records(season, g, owners))
    records.extend(_score_records(season, games, owners))

    late_weeks = set(window.late_season_weeks(LATE_SEASON_WEEKS))
    series: dict[int, list[WeeklyEntry]] = {}
    dist_scores = []
    for g in games:
        if g.is_playoff:
            continue
        for rid in g.roster_ids:
            opp = g.opponent_of(rid)
            series.setdefault(rid, []).append(
                WeeklyEntry(
                    season=season,
                    week=g.week,
                    score=g.points_of(rid),
                    opponent_score=g.points_of(opp),
                    result=g.result_for(rid),
                    opponent_playoff_team=opp in playoff_roster_ids,
                    late_season=g.week in late_weeks,
                )
            )
            dist_scores.append(((season, g.week), g.points_of(rid)))

    return SeasonMatchups(
        season=season,
        games=tuple(games),
        records=tuple(records),
        series={rid: tuple(entries) for rid, entries in series.items()},
        distribution=ScoreDistribution.from_scores(dist_scores),
        weekly_results=compute_weekly_results(g for g in games if not g.is_playoff),
        malformed_groups=malformed,
    )
