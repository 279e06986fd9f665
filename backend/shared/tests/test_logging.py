import json
import logging
from datetime import UTC, datetime
from enum import Enum, IntEnum
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from shared.logging import _serialize_enums, setup_logging


class _Piece(IntEnum):
    FIVE = 15
    RED_FIVE = 10
    CHUN = 47

    @property
    def mjai(self) -> str:
        return {15: "5m", 10: "5mr", 47: "C"}[self.value]


@pytest.fixture(autouse=True)
def _cleanup_root_logger():
    """Close and remove all handlers from the root logger after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)


@pytest.fixture(autouse=True)
def _allow_file_logging():
    """Disable the _is_test guard so logging tests can create real file handlers."""
    with patch("shared.logging._is_test", return_value=False):
        yield


class TestSetupLogging:
    def test_configures_stdout_handler(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()
        root = logging.getLogger()

        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_returns_none_without_log_dir(self):
        assert setup_logging() is None

    def test_log_file_named_by_timestamp(self, tmp_path):
        fixed_time = datetime(2025, 3, 15, 10, 30, 45, tzinfo=UTC)
        with patch("shared.logging.datetime") as mock_dt:
            mock_dt.now.return_value = fixed_time
            log_path = setup_logging(log_dir=tmp_path / "replays")

        assert log_path is not None
        assert log_path.name == "2025-03-15_10-30-45.log"
        assert log_path.parent == tmp_path / "replays"

    def test_file_handler_added_for_string_dir(self, tmp_path):
        setup_logging(log_dir=str(tmp_path / "nested" / "dir"))
        root = logging.getLogger()

        assert len(root.handlers) == 2
        file_handler = root.handlers[1]
        assert isinstance(file_handler, logging.FileHandler)
        assert Path(file_handler.baseFilename).parent == tmp_path / "nested" / "dir"

    def test_no_file_handler_under_test_guard(self, tmp_path):
        with patch("shared.logging._is_test", return_value=True):
            result = setup_logging(log_dir=tmp_path / "replays")

        assert result is None
        assert not (tmp_path / "replays").exists()

    def test_repeated_calls_do_not_stack_handlers(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_level_argument_and_env(self, monkeypatch):
        setup_logging(level=logging.WARNING)
        assert logging.getLogger().level == logging.WARNING

        monkeypatch.setenv("LOG_LEVEL", "debug")
        setup_logging()
        assert logging.getLogger().level == logging.DEBUG

    def test_invalid_log_level_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            setup_logging()

    def test_invalid_log_format_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValueError, match="Invalid LOG_FORMAT"):
            setup_logging()

    def test_json_mode_renders_mjai_enums(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=tmp_path / "replays")

        structlog.contextvars.bind_contextvars(replay="sample")
        structlog.get_logger("test.json").info("meld recorded", pai=_Piece.RED_FIVE, seat=2)
        structlog.contextvars.clear_contextvars()

        assert log_path is not None
        parsed = json.loads(log_path.read_text().strip().splitlines()[0])
        assert parsed["event"] == "meld recorded"
        assert parsed["pai"] == "5mr"
        assert parsed["seat"] == 2
        assert parsed["replay"] == "sample"

    def test_console_mode_writes_event(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "console")
        log_path = setup_logging(log_dir=tmp_path / "replays")

        structlog.get_logger("test.console").info("hand dealt")

        assert log_path is not None
        assert "hand dealt" in log_path.read_text()


class TestSerializeEnums:
    class _Phase(Enum):
        DEAL = "deal"
        PLAY = "play"

    def test_replaces_enum_with_value(self):
        result = _serialize_enums(None, "", {"phase": self._Phase.DEAL, "msg": "hello"})
        assert result == {"phase": "deal", "msg": "hello"}

    def test_mjai_enum_rendered_as_notation(self):
        result = _serialize_enums(None, "", {"pai": _Piece.CHUN})
        assert result["pai"] == "C"

    def test_replaces_enums_inside_containers(self):
        event_dict = {
            "data": {"phase": self._Phase.PLAY, "count": 3},
            "consumed": (_Piece.FIVE, _Piece.RED_FIVE),
        }
        result = _serialize_enums(None, "", event_dict)
        assert result["data"] == {"phase": "play", "count": 3}
        assert result["consumed"] == ["5m", "5mr"]

    def test_leaves_plain_values_unchanged(self):
        event_dict = {"count": 42, "name": "test"}
        assert _serialize_enums(None, "", event_dict) == {"count": 42, "name": "test"}
