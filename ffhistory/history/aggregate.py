"""All-time aggregation across a season chain.

Seasons are folded oldest first into one accumulator per user; season-level
streaks depend on that order. Advanced metrics are recomputed from the
concatenated weekly series against the merged score distribution.
"""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass, field
from typing import Sequence

from ffhistory.api.models import User
from ffhistory.compute.core import StreakRun
from ffhistory.compute.metrics import ScoreDistribution, WeeklyEntry, compute_team_metrics
from ffhistory.compute.streaks import SeasonOutcome, fold_season_streaks, season_sort_key
from ffhistory.constants import MIN_STREAK_RECORD, POINTS_PLACES, WIN_PCT_PLACES
from ffhistory.history.models import LeagueMetadata, Record, RecordType, SeasonLine, UserStats
from ffhistory.history.season import SeasonResult

logger = logging.getLogger(__name__)


@dataclass
class _UserTotals:
    user: User
    reg_wins: int = 0
    reg_losses: int = 0
    ties: int = 0
    playoff_wins: int = 0
    playoff_losses: int = 0
    points: float = 0.0
    points_against: float = 0.0
    scored_weeks: int = 0
    championships: int = 0
    runner_ups: int = 0
    playoff_appearances: int = 0
    reg_titles: int = 0
    highest: float = 0.0
    lowest: float | None = None
    longest_win: int = 0
    longest_loss: int = 0
    current: StreakRun = field(default_factory=lambda: StreakRun("none"))
    finishes: list[int] = field(default_factory=list)
    h2h: dict[str, dict[str, int]] = field(default_factory=dict)
    lines: dict[str, SeasonLine] = field(default_factory=dict)
    series: list[WeeklyEntry] = field(default_factory=list)
    outcomes: list[SeasonOutcome] = field(default_factory=list)

    def add_score(self, score: float) -> None:
        self.highest = max(self.highest, score)
        self.lowest = score if self.lowest is None else min(self.lowest, score)

    def add_h2h(self, opponent_id: str, result: str) -> None:
        tally = self.h2h.setdefault(opponent_id, {"wins": 0, "losses": 0, "ties": 0})
        key = {"W": "wins", "L": "losses"}.get(result, "ties")
        tally[key] += 1


def _fold_season(totals: dict[str, _UserTotals], res: SeasonResult) -> None:
    for roster in res.rosters:
        user = res.owners.get(roster.roster_id)
        if user is None:
            continue
        acc = totals.get(user.user_id)
        if acc is None:
            acc = totals[user.user_id] = _UserTotals(user)
        else:
            acc.user = user  # latest season's name/avatar wins
        line = res.lines[roster.roster_id]
        acc.reg_wins += roster.wins
        acc.reg_losses += roster.losses
        acc.ties += roster.ties
        acc.points += roster.points_for
        acc.points_against += roster.points_against
        series = res.matchups.series.get(roster.roster_id, ())
        # points come from the roster record, so the divisor does too; a median
        # league records two results per week
        games = roster.games // 2 if res.league.settings.median_wins else roster.games
        acc.scored_weeks += games or len(series)
        acc.series.extend(series)
        acc.championships += line.championship
        acc.runner_ups += line.runner_up
        acc.playoff_appearances += line.playoff_appearance
        acc.reg_titles += line.regular_season_champ
        if line.finish:
            acc.finishes.append(line.finish)
        acc.lines[res.season] = line
        acc.outcomes.append(SeasonOutcome(res.season, roster.wins, roster.losses))

        streaks = res.streaks.get(roster.roster_id)
        if streaks is not None:
            acc.longest_win = max(acc.longest_win, streaks.longest_win.length)
            acc.longest_loss = max(acc.longest_loss, streaks.longest_loss.length)
            acc.current = streaks.current

    for game in res.matchups.games:
        for rid in game.roster_ids:
            user = res.owners.get(rid)
            opp = res.owners.get(game.opponent_of(rid))
            if user is None:
                continue
            acc = totals[user.user_id]
            acc.add_score(game.points_of(rid))
            result = game.result_for(rid)
            if opp is not None:
                acc.add_h2h(opp.user_id, result)
            # Consolation games in playoff weeks do not count toward playoff records
            if game.is_playoff and rid in res.playoff_roster_ids:
                if result == "W":
                    acc.playoff_wins += 1
                elif result == "L":
                    acc.playoff_losses += 1


def _pct(num: float, den: float) -> float:
    return round(num / den, WIN_PCT_PLACES) if den else 0.0


def _user_stats(acc: _UserTotals, distribution: ScoreDistribution) -> UserStats:
    wins = acc.reg_wins + acc.playoff_wins
    losses = acc.reg_losses + acc.playoff_losses
    seasons = fold_season_streaks(acc.outcomes)
    metrics = compute_team_metrics(acc.series, distribution) if acc.series else None
    current = acc.current if acc.current.kind in ("W", "L") else None
    return UserStats(
        user_id=acc.user.user_id,
        username=acc.user.display_name,
        avatar=acc.user.avatar,
        total_wins=wins,
        total_losses=losses,
        total_ties=acc.ties,
        regular_season_wins=acc.reg_wins,
        regular_season_losses=acc.reg_losses,
        playoff_wins=acc.playoff_wins,
        playoff_losses=acc.playoff_losses,
        total_points=round(acc.points, POINTS_PLACES),
        total_points_against=round(acc.points_against, POINTS_PLACES),
        championships=acc.championships,
        runner_ups=acc.runner_ups,
        playoff_appearances=acc.playoff_appearances,
        regular_season_championships=acc.reg_titles,
        win_percentage=_pct(wins + 0.5 * acc.ties, wins + losses + acc.ties),
        playoff_win_percentage=_pct(acc.playoff_wins, acc.playoff_wins + acc.playoff_losses),
        average_points_per_game=(
            round(acc.points / acc.scored_weeks, POINTS_PLACES) if acc.scored_weeks else 0.0
        ),
        average_points_against=(
            round(acc.points_against / acc.scored_weeks, POINTS_PLACES) if acc.scored_weeks else 0.0
        ),
        seasons_played=len(acc.lines),
        highest_score=acc.highest,
        lowest_score=acc.lowest,
        longest_win_streak=acc.longest_win,
        longest_loss_streak=acc.longest_loss,
        longest_winning_seasons=seasons.longest_win,
        longest_losing_seasons=seasons.longest_loss,
        current_streak=current.length if current else 0,
        streak_type=current.kind if current else None,
        best_finish=min(acc.finishes) if acc.finishes else None,
        worst_finish=max(acc.finishes) if acc.finishes else None,
        average_finish=(
            round(statistics.fmean(acc.finishes), POINTS_PLACES) if acc.finishes else 0.0
        ),
        team_name=acc.user.team_name,
        head_to_head=acc.h2h,
        season_by_season=dict(acc.lines),
        metrics=metrics,
    )


def _season_streak_records(acc: _UserTotals) -> list[Record]:
    state = fold_season_streaks(acc.outcomes)
    user = acc.user
    out: list[Record] = []
    for length, end, rtype, label in (
        (state.longest_win, state.longest_win_end, RecordType.WINNING_SEASONS, "winning"),
        (state.longest_loss, state.longest_loss_end, RecordType.LOSING_SEASONS, "losing"),
    ):
        if length < MIN_STREAK_RECORD or end is None:
            continue
        out.append(
            Record(
                type=rtype,
                season=end,
                user_id=user.user_id,
                username=user.display_name,
                avatar=user.avatar,
                value=length,
                description=f"{user.display_name} had {length} consecutive {label} seasons",
                details={"streak": length, "endSeason": end},
            )
        )
    return out


def aggregate_seasons(results: Sequence[SeasonResult]) -> tuple[list[UserStats], list[Record]]:
    """Fold season results into lifetime stats and season-level streak records.

    Users are ordered by championships, then win percentage, then name.
    """
    ordered = sorted(results, key=lambda r: season_sort_key(r.season))
    totals: dict[str, _UserTotals] = {}
    for res in ordered:
        _fold_season(totals, res)

    distribution = ScoreDistribution.combine(r.matchups.distribution for r in ordered)
    stats = [_user_stats(acc, distribution) for acc in totals.values()]
    stats.sort(key=lambda u: (-u.championships, -u.win_percentage, u.username.lower()))
    records = [rec for acc in totals.values() for rec in _season_streak_records(acc)]
    logger.debug("Aggregated %d users across %d seasons", len(stats), len(ordered))
    return stats, records


def league_metadata(results: Sequence[SeasonResult], stats: Sequence[UserStats]) -> LeagueMetadata:
    ordered = sorted(results, key=lambda r: season_sort_key(r.season))
    lows = [u.lowest_score for u in stats if u.lowest_score is not None]
    averages = [u.average_points_per_game for u in stats if u.average_points_per_game]
    return LeagueMetadata(
        total_seasons=len(ordered),
        foundation_season=ordered[0].season if ordered else None,
        current_season=ordered[-1].season if ordered else None,
        linked_league_ids=tuple(r.league.league_id for r in ordered),
        all_time_high_score=max((u.highest_score for u in stats), default=0.0),
        all_time_low_score=min(lows) if lows else None,
        most_championships=max((u.championships for u in stats), default=0),
        average_league_score=round(statistics.fmean(averages), POINTS_PLACES) if averages else 0.0,
        # each game has two participants
        total_games_played=sum(u.total_games for u in stats) / 2,
    )
