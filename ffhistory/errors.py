"""Exceptions raised by the league history engine."""

from __future__ import annotations


class HistoryError(Exception):
    """Base class for league history failures."""


class DataSourceUnavailable(HistoryError):
    """A league, season or week could not be fetched from the data source."""

    def __init__(self, resource: str, cause: Exception | None = None) -> None:
        self.resource = resource
        self.cause = cause
        msg = f"Data source unavailable for {resource}"
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)


class NoLinkedSeasonsFound(HistoryError):
    """Chain resolution produced no season with usable data."""

    def __init__(self, league_id: str) -> None:
        self.league_id = league_id
        super().__init__(f"No seasons with usable data found for league {league_id}")
