import pytest
import responses

from ffhistory.api.client import BASE_URL, SleeperClient, SleeperDataSource
from ffhistory.errors import DataSourceUnavailable


@pytest.fixture
def data_source():
    return SleeperDataSource(SleeperClient(BASE_URL, min_interval_ms=1), sport="nfl")


@responses.activate
def test_league_info_parses_settings_and_backlink(data_source):
    responses.add(
        responses.GET,
        BASE_URL + "/league/L23",
        json={
            "league_id": "L23",
            "season": "2023",
            "status": "complete",
            "name": "Dynasty",
            "previous_league_id": "L22",
            "settings": {"playoff_week_start": 15, "playoff_teams": 6, "league_average_match": 1},
            "scoring_settings": {"rec": 1.0, "pass_td": 4.0},
        },
        status=200,
    )
    league = data_source.get_league_info("L23")
    assert league.previous_league_id == "L22"
    assert league.settings.playoff_week_start == 15
    assert league.settings.median_wins
    assert league.reception_points == 1.0


@responses.activate
def test_missing_league_is_none(data_source):
    responses.add(responses.GET, BASE_URL + "/league/nope", json=None, status=404)
    assert data_source.get_league_info("nope") is None


@responses.activate
def test_http_error_raises_data_source_unavailable(data_source):
    responses.add(responses.GET, BASE_URL + "/league/L1/rosters", json={"error": "x"}, status=403)
    with pytest.raises(DataSourceUnavailable) as exc:
        data_source.get_rosters("L1")
    assert "rosters of league L1" in str(exc.value)


@responses.activate
def test_rosters_combine_decimal_points(data_source):
    responses.add(
        responses.GET,
        BASE_URL + "/league/L1/rosters",
        json=[
            {
                "roster_id": 3,
                "owner_id": "u3",
                "settings": {
                    "wins": 9,
                    "losses": 5,
                    "ties": 0,
                    "fpts": 1620,
                    "fpts_decimal": 44,
                    "fpts_against": 1500,
                    "fpts_against_decimal": 2,
                    "rank": 2,
                    "poff": 0,
                },
            }
        ],
        status=200,
    )
    (roster,) = data_source.get_rosters("L1")
    assert roster.points_for == 1620.44
    assert roster.points_against == 1500.02
    assert roster.playoff_finish is None
    assert roster.record == "9-5"


@responses.activate
def test_matchups_and_bracket(data_source):
    responses.add(
        responses.GET,
        BASE_URL + "/league/L1/matchups/3",
        json=[
            {"roster_id": 1, "matchup_id": 1, "points": 101.5},
            {"roster_id": 2, "matchup_id": 1, "points": 99.0},
            {"roster_id": 3, "matchup_id": None, "points": None},
        ],
        status=200,
    )
    responses.add(
        responses.GET,
        BASE_URL + "/league/L1/winners_bracket",
        json=[{"r": 3, "m": 7, "t1": 1, "t2": 2, "w": 2, "l": 1, "p": 1}],
        status=200,
    )
    rows = data_source.get_matchups("L1", 3)
    assert [m.scored for m in rows] == [True, True, False]
    (final,) = data_source.get_playoff_bracket("L1")
    assert final.member_roster_ids == (1, 2)
    assert (final.winner_roster_id, final.loser_roster_id, final.placement) == (2, 1, 1)


@responses.activate
def test_state_and_user_leagues(data_source):
    responses.add(responses.GET, BASE_URL + "/state/nfl", json={"season": "2024", "week": 3}, status=200)
    responses.add(
        responses.GET,
        BASE_URL + "/user/u1/leagues/nfl/2024",
        json=[{"league_id": "L24", "season": "2024", "previous_league_id": "L23"}],
        status=200,
    )
    state = data_source.get_current_league_state()
    assert (state.season, state.week) == ("2024", 3)
    (league,) = data_source.get_user_leagues("u1", "2024")
    assert league.previous_league_id == "L23"


@responses.activate
def test_users_carry_team_names(data_source):
    responses.add(
        responses.GET,
        BASE_URL + "/league/L1/users",
        json=[
            {"user_id": "u1", "display_name": "Commish", "is_owner": True, "metadata": {"team_name": "Tacos"}},
            {"user_id": "u2", "username": "second", "metadata": None},
        ],
        status=200,
    )
    first, second = data_source.get_users("L1")
    assert (first.team_name, first.is_owner) == ("Tacos", True)
    assert (second.display_name, second.team_name) == ("second", None)
