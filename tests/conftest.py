from __future__ import annotations

from collections import Counter

import pytest

from ffhistory.api.models import (
    BracketMatch,
    League,
    LeagueSettings,
    LeagueState,
    Matchup,
    Roster,
    User,
)
from ffhistory.errors import DataSourceUnavailable


def round_robin(n_teams: int, weeks: int) -> dict[int, list[tuple[int, int]]]:
    """Circle-method pairings: week -> [(roster_a, roster_b), ...]."""
    ids = list(range(1, n_teams + 1))
    out = {}
    for week in range(1, weeks + 1):
        out[week] = [(ids[i], ids[-1 - i]) for i in range(n_teams // 2)]
        ids = [ids[0], ids[-1], *ids[1:-1]]
    return out


def default_points(roster_id: int, week: int) -> float:
    # higher roster id always wins
    return 100.0 + 10 * roster_id + week / 100


class FakeDataSource:
    """In-memory ``DataSource``; ``failing`` holds keys that raise DataSourceUnavailable."""

    def __init__(self, state: LeagueState | None = None) -> None:
        self.leagues: dict[str, League] = {}
        self.users: dict[str, list[User]] = {}
        self.rosters: dict[str, list[Roster]] = {}
        self.matchups: dict[tuple[str, int], list[Matchup]] = {}
        self.brackets: dict[str, list[BracketMatch]] = {}
        self.user_leagues: dict[tuple[str, str], list[League]] = {}
        self.state = state or LeagueState("2099", 1)
        self.failing: set[tuple] = set()
        self.calls: Counter = Counter()

    def _check(self, *key) -> None:
        self.calls[key[0]] += 1
        if key in self.failing:
            raise DataSourceUnavailable(":".join(str(k) for k in key))

    def get_league_info(self, league_id):
        self._check("league", league_id)
        return self.leagues.get(league_id)

    def get_users(self, league_id):
        self._check("users", league_id)
        return list(self.users.get(league_id, []))

    def get_rosters(self, league_id):
        self._check("rosters", league_id)
        return list(self.rosters.get(league_id, []))

    def get_matchups(self, league_id, week):
        self._check("matchups", league_id, week)
        return list(self.matchups.get((league_id, week), []))

    def get_playoff_bracket(self, league_id):
        self._check("bracket", league_id)
        return self.brackets.get(league_id)

    def get_current_league_state(self):
        self._check("state")
        return self.state

    def get_user_leagues(self, user_id, season):
        self._check("user_leagues", user_id, season)
        return list(self.user_leagues.get((user_id, season), []))

    def add_league(self, league_id, season, previous=None, status="complete", **settings):
        settings.setdefault("playoff_week_start", 4)
        league = League(
            league_id=league_id,
            season=season,
            status=status,
            name=f"League {season}",
            previous_league_id=previous,
            settings=LeagueSettings(**settings),
        )
        self.leagues[league_id] = league
        return league

    def add_season(
        self,
        league_id,
        season,
        previous=None,
        *,
        n_teams=4,
        playoff_week_start=4,
        playoff_weeks=1,
        points=default_points,
        poff=None,
        status="complete",
        user_prefix="u",
    ):
        """Round-robin regular season plus ``playoff_weeks`` of playoff games.

        Roster ``i`` is owned by user ``{user_prefix}{i}``; rosters carry the
        regular-season record implied by ``points``.
        """
        league = self.add_league(
            league_id,
            season,
            previous,
            status=status,
            playoff_week_start=playoff_week_start,
            playoff_teams=n_teams // 2,
        )
        self.users[league_id] = [
            User(f"{user_prefix}{i}", f"Owner {i}", is_owner=(i == 1))
            for i in range(1, n_teams + 1)
        ]
        total_weeks = playoff_week_start + playoff_weeks - 1
        schedule = round_robin(n_teams, total_weeks)
        tally = {rid: {"w": 0, "l": 0, "t": 0, "pf": 0.0, "pa": 0.0} for rid in range(1, n_teams + 1)}
        for week, pairs in schedule.items():
            rows = []
            for mid, (a, b) in enumerate(pairs, start=1):
                pa, pb = points(a, week), points(b, week)
                rows += [Matchup(a, mid, pa), Matchup(b, mid, pb)]
                if week >= playoff_week_start:
                    continue
                for rid, mine, theirs in ((a, pa, pb), (b, pb, pa)):
                    t = tally[rid]
                    t["pf"] += mine
                    t["pa"] += theirs
                    t["w" if mine > theirs else "l" if mine < theirs else "t"] += 1
            self.matchups[(league_id, week)] = rows
        order = sorted(tally, key=lambda rid: (-tally[rid]["w"], -tally[rid]["pf"]))
        self.rosters[league_id] = [
            Roster(
                roster_id=rid,
                owner_id=f"{user_prefix}{rid}",
                wins=t["w"],
                losses=t["l"],
                ties=t["t"],
                points_for=round(t["pf"], 2),
                points_against=round(t["pa"], 2),
                rank=order.index(rid) + 1,
                playoff_finish=(poff or {}).get(rid),
            )
            for rid, t in tally.items()
        ]
        return league


@pytest.fixture
def source() -> FakeDataSource:
    return FakeDataSource()


@pytest.fixture
def owners():
    return {rid: User(f"u{rid}", f"Owner {rid}") for rid in range(1, 13)}
