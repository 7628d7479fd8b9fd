from ffhistory.compute.ranking import rank_records
from ffhistory.history.models import Record, RecordType


def _rec(rtype, value, season="2023", week=1, user="u1"):
    return Record(
        type=rtype,
        season=season,
        week=week,
        user_id=user,
        username=user,
        value=value,
        description=f"{user} {value}",
    )


def test_never_more_than_ten_per_type_with_dense_ranks():
    records = [_rec(RecordType.HIGH_SCORE, 100.0 + i, week=i) for i in range(1, 40)]
    records += [_rec(RecordType.BLOWOUT, 31.0 + i, week=i) for i in range(1, 4)]
    ranked = rank_records(records)
    highs = [r for r in ranked if r.type == RecordType.HIGH_SCORE]
    assert len(highs) == 10
    assert [r.contextual_rank for r in highs] == list(range(1, 11))
    assert highs[0].value == 139.0
    blowouts = [r for r in ranked if r.type == RecordType.BLOWOUT]
    assert [r.contextual_rank for r in blowouts] == [1, 2, 3]


def test_lower_is_better_types_sort_ascending():
    records = [_rec(RecordType.LOW_SCORE, v, week=i) for i, v in enumerate([80.0, 60.5, 72.0])]
    records += [_rec(RecordType.CLOSE_GAME, v, week=i) for i, v in enumerate([5.0, 0.4, 9.1])]
    ranked = rank_records(records)
    assert [r.value for r in ranked if r.type == RecordType.LOW_SCORE] == [60.5, 72.0, 80.0]
    assert [r.value for r in ranked if r.type == RecordType.CLOSE_GAME] == [0.4, 5.0, 9.1]


def test_identical_events_are_deduplicated():
    a = _rec(RecordType.HIGH_SCORE, 150.0)
    ranked = rank_records([a, a, _rec(RecordType.HIGH_SCORE, 150.0)])
    assert len(ranked) == 1


def test_ties_break_on_season_then_week_then_user():
    records = [
        _rec(RecordType.HIGH_SCORE, 150.0, season="2022", week=3, user="b"),
        _rec(RecordType.HIGH_SCORE, 150.0, season="2021", week=5, user="c"),
        _rec(RecordType.HIGH_SCORE, 150.0, season="2022", week=3, user="a"),
        _rec(RecordType.HIGH_SCORE, 150.0, season="2022", week=1, user="d"),
    ]
    ranked = rank_records(records)
    assert [r.user_id for r in ranked] == ["c", "d", "a", "b"]


def test_inputs_are_not_mutated():
    record = _rec(RecordType.HIGH_SCORE, 150.0)
    ranked = rank_records([record])
    assert record.contextual_rank is None
    assert ranked[0].contextual_rank == 1
