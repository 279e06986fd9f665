"""Tests for the shanten-replay command line."""

from unittest.mock import patch

import pytest

from tracker.replay.cli import main
from tracker.tests.helpers.events import as_log, start_kyoku_data

LOG = as_log(
    start_kyoku_data("123456789m1p234s"),
    {"type": "tsumo", "actor": 0, "pai": "1p"},
    {"type": "dahai", "actor": 0, "pai": "1p", "tsumogiri": True},
)


@pytest.fixture(autouse=True)
def _no_logging_setup():
    """Keep the test structlog configuration in place."""
    with patch("tracker.replay.cli.setup_logging") as mock_setup:
        yield mock_setup


class TestMain:
    def test_prints_decision_points(self, tmp_path, capsys):
        path = tmp_path / "game.jsonl"
        path.write_text(LOG, encoding="utf-8")

        assert main([str(path), "--seat", "0"]) == 0

        out = capsys.readouterr().out
        assert "Events: 3" in out
        assert "Decision points: 1" in out
        assert "123456789m11p234s" in out
        assert "tsumo" in out

    def test_strict_failure_exits_nonzero(self, tmp_path, capsys):
        path = tmp_path / "game.jsonl"
        path.write_text(LOG, encoding="utf-8")

        assert main([str(path)]) == 1
        assert "Replay error at event 0" in capsys.readouterr().err

    def test_lenient_reports_skipped_events(self, tmp_path, capsys):
        path = tmp_path / "game.jsonl"
        path.write_text(LOG, encoding="utf-8")

        assert main([str(path), "--lenient"]) == 0
        assert "Skipped events: 0@seat1, 0@seat2, 0@seat3" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.jsonl")]) == 1
        assert "Cannot read replay file" in capsys.readouterr().err

    def test_configures_logging_from_settings(self, tmp_path, monkeypatch, _no_logging_setup):
        monkeypatch.setenv("TRACKER_LOG_DIR", str(tmp_path / "logs"))
        path = tmp_path / "game.jsonl"
        path.write_text(LOG, encoding="utf-8")

        main([str(path), "--seat", "0"])

        _no_logging_setup.assert_called_once_with(log_dir=str(tmp_path / "logs"))
