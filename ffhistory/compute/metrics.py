"""Advanced per-team performance scores.

Every metric is a pure function ``(series, distribution) -> MetricResult``
registered in ``METRICS``:

* ``series`` is one team's chronological list of ``WeeklyEntry`` (one per
  scored game).
* ``distribution`` holds every team's score for each period, keyed by
  ``(season, week)`` so a week is always compared with its own league
  context.

Season scores use one season's series and distribution. All-time scores
concatenate a team's series across seasons and merge the distributions,
then run the same functions again; season scores are never averaged.
"""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Sequence

from ffhistory.compute.core import longest_streaks
from ffhistory.constants import (
    CLOSE_GAME_MARGIN,
    EFFICIENCY_BENCHMARK_PPG,
    EXPLOSIVE_FACTOR,
    LUCK_CLOSE_LOSS_PENALTY,
    LUCK_POINTS_PER_WIN,
    STREAK_POINTS_PER_WIN,
)

Period = tuple[str, int]


@dataclass(frozen=True, slots=True)
class WeeklyEntry:
    season: str
    week: int
    score: float
    opponent_score: float
    result: str
    opponent_playoff_team: bool = False
    late_season: bool = False

    @property
    def period(self) -> Period:
        return (self.season, self.week)

    @property
    def margin(self) -> float:
        return round(abs(self.score - self.opponent_score), 2)


@dataclass(frozen=True, slots=True)
class ScoreDistribution:
    weeks: Mapping[Period, tuple[float, ...]] = field(default_factory=dict)

    @classmethod
    def from_scores(cls, scores: Iterable[tuple[Period, float]]) -> "ScoreDistribution":
        weeks: dict[Period, list[float]] = {}
        for period, score in scores:
            weeks.setdefault(period, []).append(float(score))
        return cls({p: tuple(v) for p, v in weeks.items()})

    @classmethod
    def combine(cls, distributions: Iterable["ScoreDistribution"]) -> "ScoreDistribution":
        merged: dict[Period, tuple[float, ...]] = {}
        for dist in distributions:
            for period, scores in dist.weeks.items():
                merged[period] = merged.get(period, ()) + tuple(scores)
        return cls(merged)

    def scores_for(self, period: Period) -> tuple[float, ...]:
        return self.weeks.get(period, ())

    def average(self, period: Period) -> float | None:
        scores = self.scores_for(period)
        return statistics.fmean(scores) if scores else None


@dataclass(frozen=True, slots=True)
class MetricResult:
    score: float
    details: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"score": round(self.score, 2), **{k: _round(v) for k, v in self.details.items()}}


def _round(value: float) -> float:
    return round(value, 4) if isinstance(value, float) else value


Metric = Callable[[Sequence[WeeklyEntry], ScoreDistribution], MetricResult]

METRICS: dict[str, Metric] = {}


def metric(name: str) -> Callable[[Metric], Metric]:
    """Register a metric function under ``name``."""

    def register(fn: Metric) -> Metric:
        METRICS[name] = fn
        return fn

    return register


def _scores(series: Sequence[WeeklyEntry]) -> list[float]:
    return [e.score for e in series]


def _wins(series: Sequence[WeeklyEntry]) -> int:
    return sum(1 for e in series if e.result == "W")


def _ties(series: Sequence[WeeklyEntry]) -> int:
    return sum(1 for e in series if e.result == "T")


def _is_close(entry: WeeklyEntry) -> bool:
    return 0 < entry.margin < CLOSE_GAME_MARGIN


def volatility_index(scores: Sequence[float]) -> float:
    """Interquartile range of the weekly scores."""
    if len(scores) < 2:
        return 0.0
    ordered = sorted(scores)
    q1 = ordered[math.floor(len(ordered) * 0.25)]
    q3 = ordered[math.floor(len(ordered) * 0.75)]
    return q3 - q1


def boom_bust_ratio(scores: Sequence[float]) -> float:
    if not scores:
        return 0.0
    mean = statistics.fmean(scores)
    booms = sum(1 for s in scores if s > mean * 1.2)
    busts = sum(1 for s in scores if s < mean * 0.8)
    return booms / busts if busts else float(booms)


def coefficient_of_variation(scores: Sequence[float]) -> float:
    if not scores:
        return 0.0
    mean = statistics.fmean(scores)
    if mean <= 0:
        return 0.0
    return statistics.pstdev(scores) / mean


def consistency_score(cv: float) -> float:
    return max(0.0, min(100.0, 100.0 - cv * 100.0))


@metric("consistency")
def consistency(series: Sequence[WeeklyEntry], distribution: ScoreDistribution) -> MetricResult:
    scores = _scores(series)
    if not scores:
        return MetricResult(0.0)
    cv = coefficient_of_variation(scores)
    return MetricResult(
        consistency_score(cv),
        {
            "standardDeviation": statistics.pstdev(scores),
            "coefficientOfVariation": cv,
            "volatilityIndex": volatility_index(scores),
            "boomBustRatio": boom_bust_ratio(scores),
        },
    )


@metric("explosiveness")
def explosiveness(series: Sequence[WeeklyEntry], distribution: ScoreDistribution) -> MetricResult:
    if not series:
        return MetricResult(0.0)
    explosive = 0
    for e in series:
        avg = distribution.average(e.period)
        if avg is not None and e.score > avg * EXPLOSIVE_FACTOR:
            explosive += 1
    rate = explosive / len(series)
    return MetricResult(rate * 100.0, {"explosiveGames": explosive, "explosiveRate": rate})


@metric("clutch")
def clutch(series: Sequence[WeeklyEntry], distribution: ScoreDistribution) -> MetricResult:
    close = [e for e in series if _is_close(e)]
    close_wins = _wins(close)
    top_wins = sum(1 for e in series if e.result == "W" and e.opponent_playoff_team)
    rate = close_wins / len(close) if close else 0.0
    return MetricResult(
        rate * 100.0,
        {
            "closeWins": close_wins,
            "closeGames": len(close),
            "closeWinRate": rate,
            "topWins": top_wins,
        },
    )


@metric("efficiency")
def efficiency(series: Sequence[WeeklyEntry], distribution: ScoreDistribution) -> MetricResult:
    scores = _scores(series)
    if not scores:
        return MetricResult(0.0)
    ppg = statistics.fmean(scores)
    wins = _wins(series)
    win_pct = (wins + 0.5 * _ties(series)) / len(series) * 100.0
    points_eff = min(100.0, ppg / EFFICIENCY_BENCHMARK_PPG * 100.0)
    return MetricResult(
        (points_eff + win_pct) / 2.0,
        {
            "pointsPerGame": ppg,
            "winPercentage": win_pct,
            "pointsPerWin": sum(scores) / wins if wins else 0.0,
            "scoringEfficiency": ppg / math.sqrt(statistics.pvariance(scores) + 1),
        },
    )


@metric("momentum")
def momentum(series: Sequence[WeeklyEntry], distribution: ScoreDistribution) -> MetricResult:
    late = [e for e in series if e.late_season]
    late_wins = _wins(late)
    late_rate = late_wins / len(late) if late else 0.0
    # Index positions keep concatenated multi-season series in order
    best_win, _ = longest_streaks([(i, e.result) for i, e in enumerate(series)])
    streak_score = min(100.0, best_win.length * STREAK_POINTS_PER_WIN)
    return MetricResult(
        (late_rate * 100.0 + streak_score) / 2.0,
        {
            "lateSeasonWins": late_wins,
            "lateSeasonGames": len(late),
            "finalWeeksWinRate": late_rate,
            "longestWinStreak": best_win.length,
        },
    )


def all_play_share(score: float, week_scores: Sequence[float]) -> float:
    """Fraction of the other scores of a week that ``score`` beats (ties half)."""
    others = list(week_scores)
    if score in others:
        others.remove(score)
    if not others:
        return 0.0
    beaten = sum(1 for s in others if score > s)
    tied = sum(1 for s in others if score == s)
    return (beaten + 0.5 * tied) / len(others)


def expected_wins(series: Sequence[WeeklyEntry], distribution: ScoreDistribution) -> float:
    return sum(all_play_share(e.score, distribution.scores_for(e.period)) for e in series)


def luck_score(rating: float, close_losses: int) -> float:
    win_luck = max(0.0, min(100.0, 50.0 + rating * LUCK_POINTS_PER_WIN))
    return max(0.0, win_luck - close_losses * LUCK_CLOSE_LOSS_PENALTY)


@metric("luck")
def luck(series: Sequence[WeeklyEntry], distribution: ScoreDistribution) -> MetricResult:
    if not series:
        return MetricResult(0.0)
    expected = expected_wins(series, distribution)
    actual = _wins(series) + 0.5 * _ties(series)
    close_losses = sum(1 for e in series if e.result == "L" and _is_close(e))
    rating = actual - expected
    return MetricResult(
        luck_score(rating, close_losses),
        {
            "expectedWins": expected,
            "actualWins": actual,
            "luckRating": rating,
            "closeLosses": close_losses,
        },
    )


@dataclass(frozen=True, slots=True)
class TeamMetrics:
    games: int
    wins: int
    losses: int
    ties: int
    points_total: float
    points_average: float
    points_high: float
    points_low: float
    results: Mapping[str, MetricResult] = field(default_factory=dict)

    def score(self, name: str) -> float:
        return self.results[name].score

    def to_dict(self) -> dict:
        return {
            "record": {
                "wins": self.wins,
                "losses": self.losses,
                "ties": self.ties,
                "gamesPlayed": self.games,
            },
            "points": {
                "total": round(self.points_total, 2),
                "average": round(self.points_average, 2),
                "high": self.points_high,
                "low": self.points_low,
            },
            **{name: result.to_dict() for name, result in self.results.items()},
        }


def compute_team_metrics(
    series: Sequence[WeeklyEntry],
    distribution: ScoreDistribution,
    metrics: Mapping[str, Metric] | None = None,
) -> TeamMetrics:
    registry = METRICS if metrics is None else metrics
    scores = _scores(series)
    return TeamMetrics(
        games=len(series),
        wins=_wins(series),
        losses=sum(1 for e in series if e.result == "L"),
        ties=_ties(series),
        points_total=sum(scores),
        points_average=statistics.fmean(scores) if scores else 0.0,
        points_high=max(scores) if scores else 0.0,
        points_low=min(scores) if scores else 0.0,
        results={name: fn(series, distribution) for name, fn in registry.items()},
    )
