from . import core

group_rows = core.group_rows
pair_week = core.pair_week
compute_weekly_results = core.compute_weekly_results
current_streak = core.current_streak
longest_streaks = core.longest_streaks

__all__ = [
    "group_rows",
    "pair_week",
    "compute_weekly_results",
    "current_streak",
    "longest_streaks",
]
