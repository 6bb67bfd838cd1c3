"""Tests for logging_config: console/file handlers, idempotency, and level sync."""

import logging
from pathlib import Path
import pytest
from character_api import logging_config as lc


def _reset_configured(monkeypatch):
    monkeypatch.setattr(lc, "_configured", False, raising=False)


def test_build_dict_config_console_only():
    cfg = lc._build_dict_config(log_file=None, level="INFO")
    assert list(cfg["handlers"]) == ["console"]
    assert cfg["root"]["handlers"] == ["console"]
    assert cfg["disable_existing_loggers"] is False


def test_configure_logging_adds_file_handler_and_writes(monkeypatch, tmp_path):
    """With LOG_FILE_PATH set, the parent dir is created and records land in the file."""
    _reset_configured(monkeypatch)
    log_file: Path = tmp_path / "nested" / "characters.log"
    monkeypatch.setenv("LOG_FILE_PATH", str(log_file))
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    lc.configure_logging()

    root = logging.getLogger()
    assert any(getattr(h, "baseFilename", None) == str(log_file) for h in root.handlers)
    assert log_file.parent.is_dir()

    logging.getLogger("character_api.test").info("route.characters.create id=%d", 1)
    for h in root.handlers:
        h.flush()
    assert "route.characters.create id=1" in log_file.read_text()


def test_configure_logging_aligns_library_levels_and_is_idempotent(monkeypatch):
    _reset_configured(monkeypatch)
    monkeypatch.delenv("LOG_FILE_PATH", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "debug")

    lc.configure_logging()

    for name in lc.ALIGNED_LOGGERS:
        assert logging.getLogger(name).level == logging.DEBUG

    root = logging.getLogger()
    before = len(root.handlers)
    lc.configure_logging()
    assert len(root.handlers) == before


@pytest.mark.parametrize("lvl", ["WARNING", "ERROR"])
def test_build_dict_config_with_file(tmp_path, lvl):
    cfg = lc._build_dict_config(str(tmp_path / "x.log"), lvl)
    assert cfg["root"]["handlers"] == ["console", "file"]
    assert cfg["root"]["level"] == lvl
    assert cfg["handlers"]["file"]["class"] == "logging.handlers.WatchedFileHandler"
