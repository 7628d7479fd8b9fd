import json

import pytest

from ffhistory.cli import history_report
from ffhistory.errors import NoLinkedSeasonsFound
from ffhistory.history.collect import build_league_history
from ffhistory.history.config import HistoryConfig


@pytest.fixture
def fake_build(source, monkeypatch):
    source.add_season("C1", "2023", n_teams=4, playoff_week_start=4, playoff_weeks=1, poff={4: 1, 3: 2})

    def build(league_id, config=None, progress_callback=None):
        cfg = HistoryConfig(playoff_round_count=1, max_workers=1)
        return build_league_history(league_id, source=source, config=cfg, progress_callback=progress_callback)

    monkeypatch.setattr(history_report, "build_league_history", build)
    return source


def test_writes_history_json(fake_build, tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("SLEEPER_LEAGUE_ID", raising=False)
    rc = history_report.main(["--league-id", "C1", "--out-dir", str(tmp_path), "--json-compact"])
    assert rc == 0
    out = tmp_path / "C1" / "history.json"
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["leagueId"] == "C1"
    assert payload["seasonStats"]["2023"]["champion"] == "u4"
    assert "Wrote [json]" in capsys.readouterr().out


def test_dry_run_writes_nothing(fake_build, tmp_path):
    rc = history_report.main(["--league-id", "C1", "--out-dir", str(tmp_path), "--dry-run", "--verbose"])
    assert rc == 0
    assert not (tmp_path / "C1").exists()


def test_missing_chain_exits_non_zero(monkeypatch, tmp_path, capsys):
    def build(league_id, config=None, progress_callback=None):
        raise NoLinkedSeasonsFound(league_id)

    monkeypatch.setattr(history_report, "build_league_history", build)
    rc = history_report.main(["--league-id", "nope", "--out-dir", str(tmp_path)])
    assert rc == 1
    assert "No seasons with usable data" in capsys.readouterr().err


def test_missing_league_id_exits_non_zero(monkeypatch, tmp_path):
    monkeypatch.delenv("SLEEPER_LEAGUE_ID", raising=False)
    assert history_report.main(["--out-dir", str(tmp_path)]) == 1
