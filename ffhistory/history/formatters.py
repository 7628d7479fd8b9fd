"""Output format helpers for league history."""

from __future__ import annotations

import json

from .models import LeagueHistory


def format_json(history: LeagueHistory, schema_version: str, *, pretty: bool = True) -> str:
    """Render the history payload to JSON.

    Keys are sorted so repeated runs over the same data produce identical
    files.
    """
    payload = history.to_json_payload(schema_version)
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True)
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def summary_lines(history: LeagueHistory) -> list[str]:
    meta = history.league_metadata
    lines = [
        f"Seasons: {meta.total_seasons} ({meta.foundation_season}-{meta.current_season})",
        f"Games played: {meta.total_games_played:g}",
        f"Records: {len(history.records)}",
    ]
    for season, stats in history.season_stats.items():
        champ = next(
            (u.username for u in history.all_time_stats if u.user_id == stats.champion), "-"
        )
        flag = " (low confidence)" if stats.champion_low_confidence else ""
        lines.append(f"  {season}: champion {champ}{flag}")
    return lines
