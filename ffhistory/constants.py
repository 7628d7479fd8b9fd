# constants.py
# Centralized constants used by the league history engine. Do not change values without bumping SCHEMA_VERSION.

SCHEMA_VERSION = "2.0.0"

# Week window defaults
DEFAULT_PLAYOFF_WEEK_START = 15
DEFAULT_PLAYOFF_ROUND_COUNT = 3  # one round plus a two-week championship
DEFAULT_PLAYOFF_TEAMS = 6

# Game classification
BLOWOUT_MARGIN = 30.0  # strictly greater
CLOSE_GAME_MARGIN = 10.0  # strictly less, and above zero

# Record ranking
SCORE_CANDIDATES_PER_SEASON = 50
TOP_RECORDS_PER_TYPE = 10
MIN_STREAK_RECORD = 2
LOWER_IS_BETTER = frozenset({"lowScore", "playoffLowScore", "closeGame"})

# Advanced metrics
EXPLOSIVE_FACTOR = 1.2
EFFICIENCY_BENCHMARK_PPG = 150.0
LATE_SEASON_WEEKS = 4
STREAK_POINTS_PER_WIN = 20.0  # 5+ game win streak scores 100
LUCK_POINTS_PER_WIN = 20.0
LUCK_CLOSE_LOSS_PENALTY = 10.0

# Formatting
WIN_PCT_PLACES = 4
POINTS_PLACES = 2

# Throttling defaults
DEFAULT_MIN_INTERVAL_SEC = 0.10  # ~600 rpm
DEFAULT_MAX_WORKERS = 4
