"""Season champion resolution.

Champions are resolved by an ordered chain of independent strategies; the
first one that produces a result wins. Pass a different sequence to
``resolve_champion`` to reorder or disable strategies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from ffhistory.api.models import BracketMatch, League, Matchup, Roster
from ffhistory.compute.core import group_rows
from ffhistory.constants import DEFAULT_PLAYOFF_TEAMS

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChampionContext:
    league: League
    rosters: tuple[Roster, ...]
    bracket: tuple[BracketMatch, ...] | None = None
    final_week_rows: tuple[Matchup, ...] = ()

    def roster(self, roster_id: int | None) -> Roster | None:
        if roster_id is None:
            return None
        return next((r for r in self.rosters if r.roster_id == roster_id), None)


@dataclass(frozen=True, slots=True)
class ChampionResult:
    champion_roster_id: int
    runner_up_roster_id: int | None
    method: str
    low_confidence: bool = False


Strategy = Callable[[ChampionContext], "ChampionResult | None"]


def _record_key(r: Roster) -> tuple[int, float]:
    return (r.wins, r.points_for)


def from_playoff_finish(ctx: ChampionContext) -> ChampionResult | None:
    """Roster ``poff`` field: 1 is the champion, 2 the runner-up."""
    champ = next((r for r in ctx.rosters if r.playoff_finish == 1), None)
    if champ is None:
        return None
    runner = next((r for r in ctx.rosters if r.playoff_finish == 2), None)
    return ChampionResult(
        champ.roster_id, runner.roster_id if runner else None, "playoff_finish"
    )


def _final_bracket_match(bracket: Sequence[BracketMatch]) -> BracketMatch | None:
    decided = [m for m in bracket if m.winner_roster_id is not None and m.round > 0]
    if not decided:
        return None
    last_round = max(m.round for m in decided)
    finals = [m for m in decided if m.round == last_round]
    # Third/fifth place games share the last round; placement 1 is the title game
    title = [m for m in finals if m.placement == 1]
    if title:
        return title[0]
    unplaced = [m for m in finals if m.placement is None]
    pool = unplaced or finals
    return min(pool, key=lambda m: m.match_id if m.match_id is not None else 0)


def from_bracket(ctx: ChampionContext) -> ChampionResult | None:
    """Highest-round winners-bracket match with a declared winner."""
    if not ctx.bracket:
        return None
    final = _final_bracket_match(ctx.bracket)
    if final is None or ctx.roster(final.winner_roster_id) is None:
        return None
    loser_id = final.loser_roster_id
    if loser_id is None:
        loser_id = next(
            (rid for rid in final.member_roster_ids if rid != final.winner_roster_id), None
        )
    runner = ctx.roster(loser_id)
    return ChampionResult(
        final.winner_roster_id, runner.roster_id if runner else None, "bracket"
    )


def from_final_week(ctx: ChampionContext) -> ChampionResult | None:
    """Highest matchup id of the final playoff week is taken as the title game."""
    groups = {mid: rows for mid, rows in group_rows(ctx.final_week_rows).items() if mid >= 0}
    if not groups:
        return None
    game = groups[max(groups)]
    if len(game) != 2:
        return None
    a, b = game
    if a.points == b.points:
        return None
    winner, loser = (a, b) if a.points > b.points else (b, a)
    if ctx.roster(winner.roster_id) is None:
        return None
    return ChampionResult(winner.roster_id, loser.roster_id, "final_week")


def from_best_record(ctx: ChampionContext) -> ChampionResult | None:
    """Completed season without playoff data: assume the best record won.

    This is an approximation and is flagged as low confidence.
    """
    if ctx.league.status != "complete":
        return None
    played = [r for r in ctx.rosters if r.games > 0]
    if not played:
        return None
    best = max(played, key=_record_key)
    return ChampionResult(best.roster_id, None, "best_record", low_confidence=True)


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    from_playoff_finish,
    from_bracket,
    from_final_week,
    from_best_record,
)


def resolve_champion(
    ctx: ChampionContext, strategies: Sequence[Strategy] = DEFAULT_STRATEGIES
) -> ChampionResult | None:
    for strategy in strategies:
        result = strategy(ctx)
        if result is not None:
            logger.debug(
                "Season %s: champion roster %s via %s",
                ctx.league.season,
                result.champion_roster_id,
                result.method,
            )
            return result
    logger.info("Season %s: champion could not be determined", ctx.league.season)
    return None


def regular_season_champion(rosters: Sequence[Roster]) -> Roster | None:
    """Most wins, ties broken by points for."""
    played = [r for r in rosters if r.games > 0]
    if not played:
        return None
    return max(played, key=_record_key)


def playoff_roster_ids(league: League, rosters: Sequence[Roster]) -> frozenset[int]:
    """Rosters that reached the playoffs.

    Uses ``poff`` when the league reports it, otherwise the regular-season
    rank against the configured number of playoff teams.
    """
    if any(r.playoff_finish for r in rosters):
        return frozenset(r.roster_id for r in rosters if r.playoff_finish)
    teams = league.settings.playoff_teams or DEFAULT_PLAYOFF_TEAMS
    return frozenset(r.roster_id for r in rosters if r.rank and r.rank <= teams)


def final_standing(roster: Roster, champion: ChampionResult | None) -> int:
    """Finish used for best/worst finish: playoff finish, then title game, then rank."""
    if roster.playoff_finish:
        return roster.playoff_finish
    if champion is not None:
        if roster.roster_id == champion.champion_roster_id:
            return 1
        if roster.roster_id == champion.runner_up_roster_id:
            return 2
    return roster.rank or 0
