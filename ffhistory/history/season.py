"""Single-season analysis: everything derived from one league id.

``analyze_season`` is pure. It takes fetched snapshots plus the week window
and returns a ``SeasonResult`` that the all-time aggregator folds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping

from ffhistory.api.models import BracketMatch, League, Matchup, Roster, User
from ffhistory.compute.champions import (
    ChampionContext,
    ChampionResult,
    Strategy,
    DEFAULT_STRATEGIES,
    final_standing,
    playoff_roster_ids,
    regular_season_champion,
    resolve_champion,
)
from ffhistory.compute.core import StreakRun, current_streak, longest_streaks
from ffhistory.compute.matchups import SeasonMatchups, analyze_season_matchups
from ffhistory.compute.metrics import TeamMetrics, compute_team_metrics
from ffhistory.compute.weeks import WeekWindow
from ffhistory.constants import MIN_STREAK_RECORD
from ffhistory.history.models import Record, RecordType, SeasonLine, SeasonStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SeasonInputs:
    league: League
    users: tuple[User, ...]
    rosters: tuple[Roster, ...]
    weekly_rows: Mapping[int, list[Matchup]]
    bracket: tuple[BracketMatch, ...] | None = None


@dataclass(frozen=True, slots=True)
class GameStreaks:
    longest_win: StreakRun
    longest_loss: StreakRun
    current: StreakRun


@dataclass(frozen=True, slots=True)
class SeasonResult:
    league: League
    window: WeekWindow
    rosters: tuple[Roster, ...]
    owners: Mapping[int, User]
    matchups: SeasonMatchups
    champion: ChampionResult | None
    regular_season_champion: Roster | None
    playoff_roster_ids: frozenset[int]
    lines: Mapping[int, SeasonLine] = field(default_factory=dict)
    streaks: Mapping[int, GameStreaks] = field(default_factory=dict)
    team_metrics: Mapping[int, TeamMetrics] = field(default_factory=dict)
    records: tuple[Record, ...] = ()

    @property
    def season(self) -> str:
        return self.league.season

    def user_id_of(self, roster_id: int | None) -> str | None:
        user = self.owners.get(roster_id) if roster_id is not None else None
        return user.user_id if user else None

    def stats(self) -> SeasonStats:
        m = self.matchups
        champ = self.champion
        return SeasonStats(
            league_id=self.league.league_id,
            season=self.season,
            total_games=m.total_games,
            average_score=m.average_score,
            highest_score=m.highest_score,
            lowest_score=m.lowest_score,
            regular_season_weeks=self.window.regular_season_weeks,
            playoff_week_start=self.window.playoff_week_start,
            playoff_week_end=self.window.playoff_week_end,
            championship_week_start=self.window.championship_week_start,
            championship_week_end=self.window.championship_week_end,
            champion=self.user_id_of(champ.champion_roster_id) if champ else None,
            runner_up=self.user_id_of(champ.runner_up_roster_id) if champ else None,
            champion_method=champ.method if champ else None,
            champion_low_confidence=champ.low_confidence if champ else False,
            regular_season_champion=(
                self.user_id_of(self.regular_season_champion.roster_id)
                if self.regular_season_champion
                else None
            ),
            closest_game=m.closest_game,
            biggest_blowout=m.biggest_blowout,
            malformed_groups=m.malformed_groups,
            points_per_reception=self.league.reception_points,
            team_metrics={
                self.owners[rid].user_id: tm
                for rid, tm in self.team_metrics.items()
                if rid in self.owners
            },
        )


def map_owners(users: tuple[User, ...], rosters: tuple[Roster, ...]) -> dict[int, User]:
    """Roster id -> owning user. Owners missing from the user list get a stub."""
    by_id = {u.user_id: u for u in users}
    owners: dict[int, User] = {}
    for r in rosters:
        if not r.owner_id:
            continue
        owners[r.roster_id] = by_id.get(r.owner_id) or User(r.owner_id, f"Team {r.roster_id}")
    return owners


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        return f"{n}th"
    return f"{n}" + {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def _roster_record(
    rtype: str, season: str, user: User, roster: Roster, value: float, description: str, **kw
) -> Record:
    details = {"record": roster.record, "pointsFor": roster.points_for}
    details.update(kw.pop("details", {}))
    return Record(
        type=rtype,
        season=season,
        user_id=user.user_id,
        username=user.display_name,
        avatar=user.avatar,
        value=value,
        description=description,
        details=details,
        **kw,
    )


def _standing_records(res: SeasonResult) -> list[Record]:
    season = res.season
    by_rid = {r.roster_id: r for r in res.rosters}
    out: list[Record] = []
    champ = res.champion
    if champ is not None:
        roster = by_rid.get(champ.champion_roster_id)
        user = res.owners.get(champ.champion_roster_id)
        if roster and user:
            desc = f"{user.display_name} won the {season} championship"
            if champ.low_confidence:
                desc += " (best regular-season record, no playoff data)"
            out.append(
                _roster_record(
                    RecordType.CHAMPIONSHIP, season, user, roster, 1, desc,
                    details={"rank": 1, "method": champ.method},
                    is_playoff=True,
                    low_confidence=champ.low_confidence,
                )
            )
        roster = by_rid.get(champ.runner_up_roster_id) if champ.runner_up_roster_id else None
        user = res.owners.get(champ.runner_up_roster_id) if roster else None
        if roster and user:
            out.append(
                _roster_record(
                    RecordType.RUNNER_UP, season, user, roster, 2,
                    f"{user.display_name} finished as runner-up in {season}",
                    details={"rank": 2},
                    is_playoff=True,
                )
            )
    rs = res.regular_season_champion
    user = res.owners.get(rs.roster_id) if rs else None
    if rs and user:
        out.append(
            _roster_record(
                RecordType.REGULAR_SEASON_CHAMP, season, user, rs, rs.wins,
                f"{user.display_name} won the {season} regular season with {rs.wins} wins",
            )
        )
    for rid in sorted(res.playoff_roster_ids):
        roster, user = by_rid.get(rid), res.owners.get(rid)
        if roster is None or user is None:
            continue
        finish = res.lines[rid].finish if rid in res.lines else 0
        desc = f"{user.display_name} made the {season} playoffs"
        if finish:
            desc += f", finishing {_ordinal(finish)}"
        out.append(
            _roster_record(
                RecordType.PLAYOFF_APPEARANCE, season, user, roster, 1, desc,
                details={"finish": finish},
                is_playoff=True,
            )
        )
    return out


def _streak_records(res: SeasonResult) -> list[Record]:
    out: list[Record] = []
    for rid, streaks in sorted(res.streaks.items()):
        user = res.owners.get(rid)
        if user is None:
            continue
        for run, rtype, verb in (
            (streaks.longest_win, RecordType.WIN_STREAK, "won"),
            (streaks.longest_loss, RecordType.LOSS_STREAK, "lost"),
        ):
            if run.length < MIN_STREAK_RECORD:
                continue
            out.append(
                Record(
                    type=rtype,
                    season=res.season,
                    week=run.end_week,
                    user_id=user.user_id,
                    username=user.display_name,
                    avatar=user.avatar,
                    value=run.length,
                    description=(
                        f"{user.display_name} {verb} {run.length} straight games "
                        f"(Weeks {run.start_week}-{run.end_week}, {res.season})"
                    ),
                    details={"startWeek": run.start_week, "endWeek": run.end_week},
                )
            )
    return out


def analyze_season(
    inputs: SeasonInputs,
    window: WeekWindow,
    strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES,
) -> SeasonResult:
    league = inputs.league
    owners = map_owners(inputs.users, inputs.rosters)
    playoff_ids = playoff_roster_ids(league, inputs.rosters)
    matchups = analyze_season_matchups(
        league.season, inputs.weekly_rows, owners, window, playoff_ids
    )

    ctx = ChampionContext(
        league=league,
        rosters=inputs.rosters,
        bracket=inputs.bracket,
        final_week_rows=tuple(inputs.weekly_rows.get(window.championship_week_end, ())),
    )
    champion = resolve_champion(ctx, strategies)
    rs_champ = regular_season_champion(inputs.rosters)

    lines: dict[int, SeasonLine] = {}
    for r in inputs.rosters:
        lines[r.roster_id] = SeasonLine(
            season=league.season,
            league_id=league.league_id,
            roster_id=r.roster_id,
            wins=r.wins,
            losses=r.losses,
            ties=r.ties,
            points_for=r.points_for,
            points_against=r.points_against,
            finish=final_standing(r, champion),
            playoff_appearance=r.roster_id in playoff_ids,
            championship=champion is not None and r.roster_id == champion.champion_roster_id,
            runner_up=champion is not None and r.roster_id == champion.runner_up_roster_id,
            regular_season_champ=rs_champ is not None and r.roster_id == rs_champ.roster_id,
        )

    streaks = {
        rid: GameStreaks(*longest_streaks(results), current_streak(results))
        for rid, results in matchups.weekly_results.items()
    }
    team_metrics = {
        rid: compute_team_metrics(series, matchups.distribution)
        for rid, series in matchups.series.items()
    }

    result = SeasonResult(
        league=league,
        window=window,
        rosters=inputs.rosters,
        owners=owners,
        matchups=matchups,
        champion=champion,
        regular_season_champion=rs_champ,
        playoff_roster_ids=playoff_ids,
        lines=lines,
        streaks=streaks,
        team_metrics=team_metrics,
    )
    records = (*matchups.records, *_standing_records(result), *_streak_records(result))
    logger.debug("Season %s: %d games, %d record candidates", league.season, matchups.total_games, len(records))
    return replace(result, records=tuple(records))
