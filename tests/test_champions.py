from ffhistory.api.models import BracketMatch, League, LeagueSettings, Matchup, Roster
from ffhistory.compute.champions import (
    ChampionContext,
    from_best_record,
    from_final_week,
    playoff_roster_ids,
    regular_season_champion,
    resolve_champion,
)

def _league(status="complete", playoff_teams=6):
    return League(
        league_id="L1",
        season="2023",
        status=status,
        settings=LeagueSettings(playoff_week_start=15, playoff_teams=playoff_teams),
    )


def _rosters(n=10, poff=None):
    poff = poff or {}
    return tuple(
        Roster(
            roster_id=rid,
            owner_id=f"u{rid}",
            wins=rid,
            losses=14 - rid,
            points_for=1000.0 + rid,
            rank=n + 1 - rid,
            playoff_finish=poff.get(rid),
        )
        for rid in range(1, n + 1)
    )


def _ctx(**kw):
    kw.setdefault("league", _league())
    kw.setdefault("rosters", _rosters())
    return ChampionContext(**kw)


def test_playoff_finish_wins_first():
    bracket = (BracketMatch(3, 7, (2, 3), winner_roster_id=2, loser_roster_id=3, placement=1),)
    ctx = _ctx(rosters=_rosters(poff={4: 1, 9: 2, 10: 3}), bracket=bracket)
    result = resolve_champion(ctx)
    assert result.method == "playoff_finish"
    assert (result.champion_roster_id, result.runner_up_roster_id) == (4, 9)
    assert not result.low_confidence


def test_bracket_final_match_when_no_poff():
    bracket = (
        BracketMatch(1, 1, (3, 6), winner_roster_id=3, loser_roster_id=6),
        BracketMatch(1, 2, (4, 5), winner_roster_id=5, loser_roster_id=4),
        BracketMatch(2, 3, (1, 3), winner_roster_id=3, loser_roster_id=1),
        BracketMatch(2, 4, (2, 5), winner_roster_id=5, loser_roster_id=2),
        BracketMatch(3, 6, (1, 2), winner_roster_id=2, loser_roster_id=1, placement=3),
        BracketMatch(3, 5, (3, 5), winner_roster_id=5, loser_roster_id=3, placement=1),
    )
    result = resolve_champion(_ctx(bracket=bracket))
    assert result.method == "bracket"
    assert (result.champion_roster_id, result.runner_up_roster_id) == (5, 3)


def test_bracket_runner_up_from_members_when_loser_missing():
    bracket = (BracketMatch(3, 5, (3, 5), winner_roster_id=3),)
    result = resolve_champion(_ctx(bracket=bracket))
    assert (result.champion_roster_id, result.runner_up_roster_id) == (3, 5)


def test_final_week_uses_highest_matchup_id():
    rows = (
        Matchup(1, 1, 90.0),
        Matchup(2, 1, 95.0),
        Matchup(7, 2, 120.5),
        Matchup(8, 2, 118.0),
    )
    result = resolve_champion(_ctx(final_week_rows=rows))
    assert result.method == "final_week"
    assert (result.champion_roster_id, result.runner_up_roster_id) == (7, 8)


def test_final_week_tie_falls_through():
    rows = (Matchup(7, 2, 110.0), Matchup(8, 2, 110.0))
    assert from_final_week(_ctx(final_week_rows=rows)) is None
    result = resolve_champion(_ctx(final_week_rows=rows))
    assert result.method == "best_record"


def test_best_record_is_low_confidence():
    result = from_best_record(_ctx())
    assert result.champion_roster_id == 10
    assert result.runner_up_roster_id is None
    assert result.low_confidence


def test_unfinished_season_has_no_champion():
    assert resolve_champion(_ctx(league=_league(status="in_season"))) is None


def test_strategies_can_be_reordered():
    ctx = _ctx(rosters=_rosters(poff={4: 1}))
    result = resolve_champion(ctx, strategies=(from_best_record,))
    assert result.method == "best_record" and result.champion_roster_id == 10


def test_regular_season_champion_tiebreak_on_points():
    rosters = (
        Roster(1, "u1", wins=10, losses=4, points_for=1500.0),
        Roster(2, "u2", wins=10, losses=4, points_for=1600.0),
        Roster(3, "u3", wins=9, losses=5, points_for=1900.0),
    )
    assert regular_season_champion(rosters).roster_id == 2
    assert regular_season_champion(()) is None


def test_playoff_rosters_from_rank_when_no_poff():
    ids = playoff_roster_ids(_league(playoff_teams=4), _rosters())
    assert ids == frozenset({7, 8, 9, 10})
    with_poff = playoff_roster_ids(_league(), _rosters(poff={2: 1, 5: 2}))
    assert with_poff == frozenset({2, 5})
