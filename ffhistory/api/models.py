"""Immutable snapshots of the Sleeper payloads consumed by the history engine.

Every ``from_api`` constructor is tolerant of missing keys and loosely typed
values (numeric strings, ``None``) because Sleeper payloads vary by season.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ffhistory.compute.core import coerce_float, coerce_int


def _opt_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


@dataclass(frozen=True, slots=True)
class LeagueSettings:
    playoff_week_start: int | None = None
    playoff_teams: int | None = None
    playoff_week_end: int | None = None
    championship_week_start: int | None = None
    championship_week_end: int | None = None
    start_week: int = 1
    num_teams: int | None = None
    median_wins: bool = False

    @classmethod
    def from_api(cls, payload: dict | None) -> "LeagueSettings":
        s = payload or {}
        return cls(
            playoff_week_start=_opt_int(s.get("playoff_week_start")) or None,
            playoff_teams=_opt_int(s.get("playoff_teams")) or None,
            playoff_week_end=_opt_int(s.get("playoff_week_end")) or None,
            championship_week_start=_opt_int(s.get("championship_week_start")) or None,
            championship_week_end=_opt_int(s.get("championship_week_end")) or None,
            start_week=coerce_int(s.get("start_week"), 1) or 1,
            num_teams=_opt_int(s.get("num_teams")) or None,
            median_wins=bool(s.get("league_average_match") or s.get("median_wins")),
        )


@dataclass(frozen=True, slots=True)
class League:
    league_id: str
    season: str
    status: str = ""
    name: str = ""
    previous_league_id: str | None = None
    settings: LeagueSettings = field(default_factory=LeagueSettings)
    scoring_settings: dict[str, float] = field(default_factory=dict)

    @property
    def reception_points(self) -> float:
        """Points per reception (0 standard, 0.5 half PPR, 1 full PPR)."""
        return coerce_float(self.scoring_settings.get("rec"))

    @classmethod
    def from_api(cls, payload: dict) -> "League":
        prev = payload.get("previous_league_id")
        # Sleeper reports "0" for a league with no predecessor
        if prev in (None, "", "0", 0):
            prev = None
        return cls(
            league_id=str(payload.get("league_id")),
            season=str(payload.get("season") or ""),
            status=str(payload.get("status") or ""),
            name=str(payload.get("name") or ""),
            previous_league_id=str(prev) if prev is not None else None,
            settings=LeagueSettings.from_api(payload.get("settings")),
            scoring_settings=dict(payload.get("scoring_settings") or {}),
        )


@dataclass(frozen=True, slots=True)
class User:
    user_id: str
    display_name: str
    avatar: str | None = None
    team_name: str | None = None
    is_owner: bool = False

    @classmethod
    def from_api(cls, payload: dict) -> "User":
        uid = str(payload.get("user_id"))
        meta = payload.get("metadata") or {}
        team_name = None
        if isinstance(meta, dict):
            team_name = meta.get("team_name") or None
        return cls(
            user_id=uid,
            display_name=payload.get("display_name") or payload.get("username") or uid,
            avatar=payload.get("avatar"),
            team_name=team_name,
            is_owner=bool(payload.get("is_owner")),
        )


@dataclass(frozen=True, slots=True)
class Roster:
    roster_id: int
    owner_id: str | None
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    rank: int | None = None
    playoff_finish: int | None = None

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def record(self) -> str:
        base = f"{self.wins}-{self.losses}"
        return f"{base}-{self.ties}" if self.ties else base

    @classmethod
    def from_api(cls, payload: dict) -> "Roster":
        s = payload.get("settings") or {}
        owner = payload.get("owner_id")
        pf = coerce_int(s.get("fpts"), 0) + coerce_int(s.get("fpts_decimal"), 0) / 100
        pa = coerce_int(s.get("fpts_against"), 0) + coerce_int(s.get("fpts_against_decimal"), 0) / 100
        return cls(
            roster_id=coerce_int(payload.get("roster_id"), -1),
            owner_id=str(owner) if owner else None,
            wins=coerce_int(s.get("wins"), 0),
            losses=coerce_int(s.get("losses"), 0),
            ties=coerce_int(s.get("ties"), 0),
            points_for=round(pf, 2),
            points_against=round(pa, 2),
            rank=_opt_int(s.get("rank")) or None,
            playoff_finish=_opt_int(s.get("poff")) or None,
        )


@dataclass(frozen=True, slots=True)
class Matchup:
    roster_id: int
    matchup_id: int | None
    points: float | None

    @property
    def scored(self) -> bool:
        return self.points is not None and self.points > 0

    @classmethod
    def from_api(cls, payload: dict) -> "Matchup":
        pts = payload.get("points")
        return cls(
            roster_id=coerce_int(payload.get("roster_id"), -1),
            matchup_id=_opt_int(payload.get("matchup_id")),
            points=coerce_float(pts) if pts is not None else None,
        )


@dataclass(frozen=True, slots=True)
class BracketMatch:
    round: int
    match_id: int | None
    member_roster_ids: tuple[int, ...]
    winner_roster_id: int | None
    loser_roster_id: int | None = None
    placement: int | None = None

    @classmethod
    def from_api(cls, payload: dict) -> "BracketMatch":
        members = tuple(
            coerce_int(payload.get(k), -1)
            for k in ("t1", "t2")
            if isinstance(payload.get(k), (int, str))
        )
        return cls(
            round=coerce_int(payload.get("r"), 0),
            match_id=_opt_int(payload.get("m")),
            member_roster_ids=members,
            winner_roster_id=_opt_int(payload.get("w")),
            loser_roster_id=_opt_int(payload.get("l")),
            placement=_opt_int(payload.get("p")),
        )


@dataclass(frozen=True, slots=True)
class LeagueState:
    season: str
    week: int

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "LeagueState":
        return cls(
            season=str(payload.get("season") or ""),
            week=coerce_int(payload.get("week"), 0),
        )
