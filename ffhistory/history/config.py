"""Runtime configuration for history generation.

Values come from environment variables first (the same names the Sleeper
scripts use) and can be overridden by a YAML file::

    league_id: "1048313545995296768"
    sport: nfl
    max_workers: 4
    playoff_round_count: 3      # scoring weeks in the playoffs
    playoff_rounds:             # per league id or per season label
      "2021": 2
      "784512345678901234": 4
    base_url: https://api.sleeper.app/v1
    rpm_limit: 300
    min_interval_ms: 100
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from ffhistory.api.client import SleeperClient, SleeperDataSource
from ffhistory.api.models import League
from ffhistory.constants import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)


def _env_float(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name)
    try:
        return float(raw) if raw else None
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return None


def _env_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name)
    try:
        return int(raw) if raw else None
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return None


@dataclass(slots=True)
class HistoryConfig:
    league_id: str | None = None
    sport: str = "nfl"
    base_url: str | None = None
    rpm_limit: float | None = None
    min_interval_ms: float | None = None
    max_workers: int = DEFAULT_MAX_WORKERS
    playoff_round_count: int | None = None
    playoff_rounds: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "HistoryConfig":
        env = os.environ if env is None else env
        workers = _env_int(env, "FF_HISTORY_MAX_WORKERS")
        return cls(
            league_id=env.get("SLEEPER_LEAGUE_ID") or None,
            sport=env.get("SLEEPER_SPORT") or "nfl",
            base_url=env.get("SLEEPER_BASE_URL") or None,
            rpm_limit=_env_float(env, "SLEEPER_RPM_LIMIT"),
            min_interval_ms=_env_float(env, "SLEEPER_MIN_INTERVAL_MS"),
            max_workers=workers if workers and workers > 0 else DEFAULT_MAX_WORKERS,
        )

    @classmethod
    def load(
        cls, path: str | Path | None = None, env: Mapping[str, str] | None = None
    ) -> "HistoryConfig":
        """Environment defaults overridden by the YAML file at ``path``.

        Raises OSError when the file cannot be read and ValueError when its
        content is not a mapping or holds non-numeric numbers.
        """
        cfg = cls.from_env(env)
        if path is None:
            return cfg
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        cfg.apply(data)
        logger.debug("Loaded configuration from %s", path)
        return cfg

    def apply(self, data: Mapping[str, Any]) -> None:
        if data.get("league_id") is not None:
            self.league_id = str(data["league_id"])
        if data.get("sport"):
            self.sport = str(data["sport"])
        if data.get("base_url"):
            self.base_url = str(data["base_url"])
        if data.get("rpm_limit") is not None:
            self.rpm_limit = float(data["rpm_limit"])
        if data.get("min_interval_ms") is not None:
            self.min_interval_ms = float(data["min_interval_ms"])
        if data.get("max_workers") is not None:
            workers = int(data["max_workers"])
            if workers < 1:
                raise ValueError("max_workers must be at least 1")
            self.max_workers = workers
        if data.get("playoff_round_count") is not None:
            self.playoff_round_count = int(data["playoff_round_count"])
        rounds = data.get("playoff_rounds") or {}
        if not isinstance(rounds, dict):
            raise ValueError("playoff_rounds must map league ids or seasons to a count")
        self.playoff_rounds.update({str(k): int(v) for k, v in rounds.items()})

    def playoff_round_count_for(self, league: League) -> int | None:
        """League id override, then season override, then the global value."""
        if league.league_id in self.playoff_rounds:
            return self.playoff_rounds[league.league_id]
        if league.season in self.playoff_rounds:
            return self.playoff_rounds[league.season]
        return self.playoff_round_count

    def make_data_source(self) -> SleeperDataSource:
        client = SleeperClient(
            self.base_url, rpm_limit=self.rpm_limit, min_interval_ms=self.min_interval_ms
        )
        return SleeperDataSource(client, sport=self.sport)
