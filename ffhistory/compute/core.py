from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ffhistory.api.models import Matchup


def coerce_int(value: object, default: int = 0) -> int:
    """Best‑effort int conversion (supports int, float, str of digits)."""
    if value is None:
        return default
    if isinstance(value, bool):  # bool is subclass of int; handle explicitly if undesired
        return int(value)
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def coerce_float(value: object, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


@dataclass(frozen=True, slots=True)
class Game:
    """One scored head-to-head game between two rosters."""

    week: int
    matchup_id: int
    roster_a: int
    points_a: float
    roster_b: int
    points_b: float
    is_playoff: bool = False

    @property
    def margin(self) -> float:
        # Points carry two decimals; rounding keeps threshold checks exact
        return round(abs(self.points_a - self.points_b), 2)

    @property
    def tie(self) -> bool:
        return self.margin == 0

    @property
    def winner_roster_id(self) -> int | None:
        if self.tie:
            return None
        return self.roster_a if self.points_a > self.points_b else self.roster_b

    @property
    def loser_roster_id(self) -> int | None:
        if self.tie:
            return None
        return self.roster_b if self.points_a > self.points_b else self.roster_a

    @property
    def winner_points(self) -> float:
        return max(self.points_a, self.points_b)

    @property
    def loser_points(self) -> float:
        return min(self.points_a, self.points_b)

    @property
    def roster_ids(self) -> tuple[int, int]:
        return (self.roster_a, self.roster_b)

    def points_of(self, roster_id: int) -> float:
        return self.points_a if roster_id == self.roster_a else self.points_b

    def opponent_of(self, roster_id: int) -> int:
        return self.roster_b if roster_id == self.roster_a else self.roster_a

    def result_for(self, roster_id: int) -> str:
        if self.tie:
            return "T"
        return "W" if self.winner_roster_id == roster_id else "L"


def group_rows(rows: Iterable["Matchup"]) -> dict[int, list["Matchup"]]:
    """Group positively scored rows by matchup id.

    Rows without a matchup id (byes, unplayed consolation slots) get a
    deterministic synthetic id so they form singleton groups.
    """
    groups: dict[int, list] = {}
    for row in rows or []:
        if not row.scored:
            continue
        if row.matchup_id is None:
            mid = -100000 - row.roster_id
        else:
            mid = row.matchup_id
        groups.setdefault(mid, []).append(row)
    return groups


def pair_week(
    week: int, rows: Iterable["Matchup"], playoff_week_start: int | None = None
) -> tuple[list[Game], int]:
    """Pair one week's rows into games.

    Returns the games sorted by matchup id and the number of groups that did
    not pair into exactly two scored entries.
    """
    is_playoff = playoff_week_start is not None and week >= playoff_week_start
    games: list[Game] = []
    malformed = 0
    for mid, entries in sorted(group_rows(rows).items()):
        if len(entries) != 2 or mid < 0:
            malformed += 1
            continue
        a, b = entries
        if a.roster_id == b.roster_id:
            malformed += 1
            continue
        games.append(
            Game(
                week=week,
                matchup_id=mid,
                roster_a=a.roster_id,
                points_a=float(a.points or 0.0),
                roster_b=b.roster_id,
                points_b=float(b.points or 0.0),
                is_playoff=is_playoff,
            )
        )
    return games, malformed


def compute_weekly_results(games: Iterable[Game]) -> dict[int, list[tuple[int, str]]]:
    """Map roster id -> chronological list of (week, "W"|"L"|"T")."""
    results: dict[int, list[tuple[int, str]]] = {}
    for g in sorted(games, key=lambda x: (x.week, x.matchup_id)):
        for rid in g.roster_ids:
            results.setdefault(rid, []).append((g.week, g.result_for(rid)))
    return results


@dataclass(frozen=True, slots=True)
class StreakRun:
    kind: str
    length: int = 0
    start_week: int | None = None
    end_week: int | None = None

    @property
    def label(self) -> str:
        if not self.length:
            return "-"
        return f"w{self.start_week}-w{self.end_week}"


def current_streak(res_list: list[tuple[int, str]], through_week: int | None = None) -> StreakRun:
    """Streak still running at ``through_week`` (ties end a streak)."""
    filtered = [t for t in res_list if through_week is None or t[0] <= through_week]
    if not filtered:
        return StreakRun("none")
    streak_type = "none"
    length = 0
    start_wk = end_wk = filtered[-1][0]
    for week, res in reversed(filtered):
        if res == "T":
            break
        if streak_type == "none":
            streak_type = res
            length = 1
            start_wk = week
        elif res == streak_type:
            length += 1
            start_wk = week
        else:
            break
    if streak_type == "none":
        return StreakRun("none")
    return StreakRun(streak_type, length, start_wk, end_wk)


def longest_streaks(
    res_list: list[tuple[int, str]], through_week: int | None = None
) -> tuple[StreakRun, StreakRun]:
    """Longest win and loss runs; a tie or the opposite result resets the run."""
    filtered = [t for t in res_list if through_week is None or t[0] <= through_week]
    best = {"W": StreakRun("W"), "L": StreakRun("L")}
    cur_type: str | None = None
    cur_len = 0
    cur_start: int | None = None
    last_week: int | None = None

    def close_run() -> None:
        if cur_type in best and cur_len > best[cur_type].length:
            best[cur_type] = StreakRun(cur_type, cur_len, cur_start, last_week)

    for week, res in filtered:
        if res == cur_type and res != "T":
            cur_len += 1
        else:
            close_run()
            if res == "T":
                cur_type, cur_len, cur_start = None, 0, None
            else:
                cur_type, cur_len, cur_start = res, 1, week
        last_week = week
    close_run()
    return best["W"], best["L"]
