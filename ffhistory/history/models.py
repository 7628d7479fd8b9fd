from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ffhistory.compute.metrics import TeamMetrics


class RecordType:
    """Record type identifiers (emitted verbatim in the JSON payload)."""

    CHAMPIONSHIP = "championship"
    RUNNER_UP = "runnerUp"
    REGULAR_SEASON_CHAMP = "regularSeasonChamp"
    HIGH_SCORE = "highScore"
    LOW_SCORE = "lowScore"
    PLAYOFF_HIGH_SCORE = "playoffHighScore"
    PLAYOFF_LOW_SCORE = "playoffLowScore"
    WIN_STREAK = "winStreak"
    LOSS_STREAK = "lossStreak"
    WINNING_SEASONS = "winningSeasons"
    LOSING_SEASONS = "losingSeasons"
    BLOWOUT = "blowout"
    CLOSE_GAME = "closeGame"
    PLAYOFF_APPEARANCE = "playoffAppearance"


@dataclass(frozen=True, slots=True)
class Record:
    type: str
    season: str
    user_id: str
    username: str
    value: float
    description: str
    week: int | None = None
    avatar: str | None = None
    details: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    is_playoff: bool = False
    low_confidence: bool = False
    contextual_rank: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type,
            "season": self.season,
            "userId": self.user_id,
            "username": self.username,
            "avatar": self.avatar,
            "value": self.value,
            "description": self.description,
            "isPlayoff": self.is_playoff,
        }
        if self.week is not None:
            out["week"] = self.week
        if self.details:
            out["details"] = dict(self.details)
        if self.low_confidence:
            out["lowConfidence"] = True
        if self.contextual_rank is not None:
            out["contextualRank"] = self.contextual_rank
        return out


@dataclass(frozen=True, slots=True)
class SeasonLine:
    """One user's result for one season."""

    season: str
    league_id: str
    roster_id: int
    wins: int
    losses: int
    ties: int
    points_for: float
    points_against: float
    finish: int = 0
    playoff_appearance: bool = False
    championship: bool = False
    runner_up: bool = False
    regular_season_champ: bool = False

    @property
    def winning_season(self) -> bool:
        decided = self.wins + self.losses
        return decided > 0 and self.wins / decided > 0.5

    def to_dict(self) -> dict[str, Any]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "pointsFor": self.points_for,
            "pointsAgainst": self.points_against,
            "finish": self.finish,
            "playoffAppearance": self.playoff_appearance,
            "championship": self.championship,
            "runnerUp": self.runner_up,
            "regularSeasonChamp": self.regular_season_champ,
        }


@dataclass(frozen=True, slots=True)
class UserStats:
    user_id: str
    username: str
    avatar: str | None
    total_wins: int
    total_losses: int
    total_ties: int
    regular_season_wins: int
    regular_season_losses: int
    playoff_wins: int
    playoff_losses: int
    total_points: float
    total_points_against: float
    championships: int
    runner_ups: int
    playoff_appearances: int
    regular_season_championships: int
    win_percentage: float
    playoff_win_percentage: float
    average_points_per_game: float
    average_points_against: float
    seasons_played: int
    highest_score: float
    lowest_score: float | None
    longest_win_streak: int
    longest_loss_streak: int
    longest_winning_seasons: int
    longest_losing_seasons: int
    current_streak: int
    streak_type: str | None
    best_finish: int | None
    worst_finish: int | None
    average_finish: float
    team_name: str | None = None
    head_to_head: dict[str, dict[str, int]] = field(default_factory=dict, compare=False)
    season_by_season: dict[str, SeasonLine] = field(default_factory=dict, compare=False)
    metrics: "TeamMetrics | None" = field(default=None, compare=False)

    @property
    def total_games(self) -> int:
        return self.total_wins + self.total_losses + self.total_ties

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "username": self.username,
            "teamName": self.team_name,
            "avatar": self.avatar,
            "totalWins": self.total_wins,
            "totalLosses": self.total_losses,
            "totalTies": self.total_ties,
            "regularSeasonWins": self.regular_season_wins,
            "regularSeasonLosses": self.regular_season_losses,
            "playoffWins": self.playoff_wins,
            "playoffLosses": self.playoff_losses,
            "totalPoints": self.total_points,
            "totalPointsAgainst": self.total_points_against,
            "championships": self.championships,
            "runnerUps": self.runner_ups,
            "playoffAppearances": self.playoff_appearances,
            "regularSeasonChampionships": self.regular_season_championships,
            "winPercentage": self.win_percentage,
            "playoffWinPercentage": self.playoff_win_percentage,
            "averagePointsPerGame": self.average_points_per_game,
            "averagePointsAgainst": self.average_points_against,
            "seasonsPlayed": self.seasons_played,
            "highestScore": self.highest_score,
            "lowestScore": self.lowest_score,
            "longestWinStreak": self.longest_win_streak,
            "longestLossStreak": self.longest_loss_streak,
            "longestWinningSeasons": self.longest_winning_seasons,
            "longestLosingSeasons": self.longest_losing_seasons,
            "currentStreak": self.current_streak,
            "streakType": self.streak_type,
            "bestFinish": self.best_finish,
            "worstFinish": self.worst_finish,
            "averageFinish": self.average_finish,
            "headToHeadRecord": {k: dict(v) for k, v in sorted(self.head_to_head.items())},
            "seasonBySeasonStats": {
                s: line.to_dict() for s, line in sorted(self.season_by_season.items())
            },
            "advancedMetrics": self.metrics.to_dict() if self.metrics is not None else None,
        }


@dataclass(frozen=True, slots=True)
class SeasonStats:
    league_id: str
    season: str
    total_games: int
    average_score: float
    highest_score: float
    lowest_score: float | None
    regular_season_weeks: int
    playoff_week_start: int
    playoff_week_end: int
    championship_week_start: int
    championship_week_end: int
    champion: str | None = None
    runner_up: str | None = None
    champion_method: str | None = None
    champion_low_confidence: bool = False
    regular_season_champion: str | None = None
    closest_game: float | None = None
    biggest_blowout: float | None = None
    malformed_groups: int = 0
    points_per_reception: float = 0.0
    team_metrics: dict[str, "TeamMetrics"] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "leagueId": self.league_id,
            "totalGames": self.total_games,
            "averageScore": self.average_score,
            "highestScore": self.highest_score,
            "lowestScore": self.lowest_score,
            "regularSeasonWeeks": self.regular_season_weeks,
            "playoffWeekStart": self.playoff_week_start,
            "playoffWeekEnd": self.playoff_week_end,
            "championshipWeekStart": self.championship_week_start,
            "championshipWeekEnd": self.championship_week_end,
            "champion": self.champion,
            "runnerUp": self.runner_up,
            "championMethod": self.champion_method,
            "championLowConfidence": self.champion_low_confidence,
            "regularSeasonChampion": self.regular_season_champion,
            "closestGame": self.closest_game,
            "biggestBlowout": self.biggest_blowout,
            "malformedGroups": self.malformed_groups,
            "pointsPerReception": self.points_per_reception,
            "teamMetrics": {uid: m.to_dict() for uid, m in sorted(self.team_metrics.items())},
        }


@dataclass(frozen=True, slots=True)
class LeagueMetadata:
    total_seasons: int
    foundation_season: str | None
    current_season: str | None
    linked_league_ids: tuple[str, ...]
    all_time_high_score: float
    all_time_low_score: float | None
    most_championships: int
    average_league_score: float
    total_games_played: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSeasons": self.total_seasons,
            "foundationSeason": self.foundation_season,
            "currentSeason": self.current_season,
            "linkedLeagueIds": list(self.linked_league_ids),
            "allTimeHighScore": self.all_time_high_score,
            "allTimeLowScore": self.all_time_low_score,
            "mostChampionships": self.most_championships,
            "averageLeagueScore": self.average_league_score,
            "totalGamesPlayed": self.total_games_played,
        }


@dataclass(slots=True)
class LeagueHistory:
    league_id: str
    records: list[Record]
    season_stats: dict[str, SeasonStats]
    all_time_stats: list[UserStats]
    league_metadata: LeagueMetadata

    def to_json_payload(self, schema_version: str) -> dict[str, Any]:
        return {
            "schema_version": schema_version,
            "leagueId": self.league_id,
            "records": [r.to_dict() for r in self.records],
            "seasonStats": {s: st.to_dict() for s, st in self.season_stats.items()},
            "allTimeStats": [u.to_dict() for u in self.all_time_stats],
            "leagueMetadata": self.league_metadata.to_dict(),
        }
