from __future__ import annotations

from dataclasses import replace
from itertools import groupby
from typing import Iterable

from ffhistory.compute.streaks import season_sort_key
from ffhistory.constants import LOWER_IS_BETTER, TOP_RECORDS_PER_TYPE
from ffhistory.history.models import Record


def _dedupe_key(r: Record) -> tuple:
    return (r.type, r.season, r.week, r.user_id, r.value)


def _sort_key(r: Record) -> tuple:
    value = r.value if r.type in LOWER_IS_BETTER else -r.value
    return (value, season_sort_key(r.season), r.week if r.week is not None else 0, r.user_id)


def rank_records(records: Iterable[Record], limit: int = TOP_RECORDS_PER_TYPE) -> list[Record]:
    """Deduplicate, rank within type and keep the top ``limit`` per type.

    Values sort descending except for lower-is-better types; ties fall back
    to (season, week, user id). Returned records are new instances carrying
    a dense ``contextual_rank`` starting at 1. Output is grouped by type in
    alphabetical order.
    """
    seen: set[tuple] = set()
    unique: list[Record] = []
    for r in records:
        key = _dedupe_key(r)
        if key in seen:
            continue
        seen.add(key)
        unique.append(r)

    ranked: list[Record] = []
    for _, group in groupby(sorted(unique, key=lambda r: r.type), key=lambda r: r.type):
        top = sorted(group, key=_sort_key)[:limit]
        ranked.extend(replace(r, contextual_rank=i) for i, r in enumerate(top, start=1))
    return ranked
