import pytest

from ffhistory.api.models import League
from ffhistory.history.config import HistoryConfig


def test_from_env_ignores_invalid_numbers():
    cfg = HistoryConfig.from_env(
        {
            "SLEEPER_LEAGUE_ID": "123",
            "SLEEPER_RPM_LIMIT": "fast",
            "SLEEPER_MIN_INTERVAL_MS": "250",
            "FF_HISTORY_MAX_WORKERS": "-2",
        }
    )
    assert cfg.league_id == "123"
    assert cfg.sport == "nfl"
    assert cfg.rpm_limit is None
    assert cfg.min_interval_ms == 250.0
    assert cfg.max_workers == 4


def test_yaml_overrides_env(tmp_path):
    path = tmp_path / "history.yaml"
    path.write_text(
        "league_id: 987\n"
        "max_workers: 8\n"
        "playoff_round_count: 3\n"
        "playoff_rounds:\n"
        "  '2021': 2\n"
        "  L900: 4\n",
        encoding="utf-8",
    )
    cfg = HistoryConfig.load(path, env={"SLEEPER_LEAGUE_ID": "123", "SLEEPER_SPORT": "nba"})
    assert cfg.league_id == "987"
    assert cfg.sport == "nba"
    assert cfg.max_workers == 8
    assert cfg.playoff_round_count_for(League("L900", "2021")) == 4
    assert cfg.playoff_round_count_for(League("L1", "2021")) == 2
    assert cfg.playoff_round_count_for(League("L1", "2022")) == 3


def test_round_count_unset_by_default():
    assert HistoryConfig().playoff_round_count_for(League("L1", "2022")) is None


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        HistoryConfig.load(path, env={})


def test_missing_file_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        HistoryConfig.load(tmp_path / "absent.yaml", env={})
