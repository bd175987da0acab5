"""Tests for configuration and logging setup."""

from pathlib import Path

from delve.config import Config
from delve.logging import MAX_FIELD_LENGTH, truncate_input_processor


def test_defaults(monkeypatch):
    """Without environment variables the defaults apply."""
    for name in ("DELVE_DATABASE_URL", "DELVE_LOG_FILE", "DELVE_JSON_LOGS"):
        monkeypatch.delenv(name, raising=False)
    config = Config.from_env()
    assert config.database_url == "sqlite:///./delve.db"
    assert config.log_file is None
    assert not config.json_logs
    assert config.fuzzy_max_distance == 2


def test_from_env(monkeypatch):
    """DELVE_* variables override the defaults."""
    monkeypatch.setenv("DELVE_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("DELVE_LOG_FILE", "/tmp/delve.log")
    monkeypatch.setenv("DELVE_JSON_LOGS", "yes")
    monkeypatch.setenv("DELVE_MAX_HEALTH", "150")
    config = Config.from_env()
    assert config.database_url == "sqlite://"
    assert config.log_file == Path("/tmp/delve.log")
    assert config.json_logs
    assert config.max_health == 150


def test_truncate_input_processor():
    """Long player input is clipped in log events."""
    event = {"event": "input_parsed", "raw_input": "x" * 200, "verb": "y" * 200}
    result = truncate_input_processor(None, "info", event)
    assert result["raw_input"] == "x" * MAX_FIELD_LENGTH + "..."
    assert result["verb"] == "y" * 200
