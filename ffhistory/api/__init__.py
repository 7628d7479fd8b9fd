from .client import DataSource, RateLimiter, SleeperClient, SleeperDataSource
from .models import BracketMatch, League, LeagueSettings, LeagueState, Matchup, Roster, User

__all__ = [
    "DataSource",
    "RateLimiter",
    "SleeperClient",
    "SleeperDataSource",
    "BracketMatch",
    "League",
    "LeagueSettings",
    "LeagueState",
    "Matchup",
    "Roster",
    "User",
]
