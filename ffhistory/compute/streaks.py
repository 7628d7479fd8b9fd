"""Season-level streaks: runs of consecutive winning or losing seasons.

The run is computed as a left fold over a user's seasons in chronological
order; the accumulator is an immutable value threaded through ``step``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import reduce
from typing import Iterable


@dataclass(frozen=True, slots=True)
class SeasonOutcome:
    season: str
    wins: int
    losses: int

    @property
    def decided(self) -> int:
        return self.wins + self.losses

    @property
    def winning(self) -> bool:
        return self.decided > 0 and self.wins / self.decided > 0.5


@dataclass(frozen=True, slots=True)
class SeasonStreakState:
    kind: str | None = None  # "W" winning seasons, "L" losing seasons
    current_streak: int = 0
    current_end: str | None = None
    longest_win: int = 0
    longest_win_end: str | None = None
    longest_loss: int = 0
    longest_loss_end: str | None = None

    @property
    def longest_streak(self) -> int:
        return max(self.longest_win, self.longest_loss)


def step(state: SeasonStreakState, outcome: SeasonOutcome) -> SeasonStreakState:
    kind = "W" if outcome.winning else "L"
    current = state.current_streak + 1 if kind == state.kind else 1
    new = replace(state, kind=kind, current_streak=current, current_end=outcome.season)
    if kind == "W" and current > state.longest_win:
        new = replace(new, longest_win=current, longest_win_end=outcome.season)
    elif kind == "L" and current > state.longest_loss:
        new = replace(new, longest_loss=current, longest_loss_end=outcome.season)
    return new


def season_sort_key(season: str) -> tuple[int, str]:
    return (int(season), season) if season.isdigit() else (10**6, season)


def fold_season_streaks(outcomes: Iterable[SeasonOutcome]) -> SeasonStreakState:
    """Fold seasons oldest first; seasons without a decided game are left out."""
    ordered = sorted((o for o in outcomes if o.decided), key=lambda o: season_sort_key(o.season))
    return reduce(step, ordered, SeasonStreakState())
