from ffhistory.compute.streaks import SeasonOutcome, SeasonStreakState, fold_season_streaks, step


def test_winning_season_needs_more_than_half():
    assert SeasonOutcome("2020", 8, 6).winning
    assert not SeasonOutcome("2020", 7, 7).winning
    assert not SeasonOutcome("2020", 0, 0).winning


def test_fold_tracks_longest_runs_and_end_seasons():
    outcomes = [
        SeasonOutcome("2019", 9, 5),
        SeasonOutcome("2020", 10, 4),
        SeasonOutcome("2021", 8, 6),
        SeasonOutcome("2022", 4, 10),
        SeasonOutcome("2023", 5, 9),
        SeasonOutcome("2024", 9, 5),
    ]
    state = fold_season_streaks(reversed(outcomes))
    assert state.longest_win == 3 and state.longest_win_end == "2021"
    assert state.longest_loss == 2 and state.longest_loss_end == "2023"
    assert state.kind == "W" and state.current_streak == 1
    assert state.longest_streak == 3


def test_step_does_not_mutate_accumulator():
    start = SeasonStreakState()
    after = step(start, SeasonOutcome("2020", 9, 5))
    assert start.current_streak == 0
    assert after.current_streak == 1 and after.kind == "W"


def test_seasons_without_decided_games_do_not_break_runs():
    outcomes = [
        SeasonOutcome("2022", 9, 5),
        SeasonOutcome("2023", 10, 4),
        SeasonOutcome("2024", 0, 0),
    ]
    state = fold_season_streaks(outcomes)
    assert state.longest_win == 2 and state.longest_win_end == "2023"
    assert state.longest_loss == 0 and state.longest_loss_end is None
    assert state.current_end == "2023"
