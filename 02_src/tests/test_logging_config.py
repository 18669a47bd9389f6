"""Tests for logging and configuration helpers."""

import json
import logging
from pathlib import Path

from messenger import config
from messenger.logging_config import JSONFormatter, get_logger, setup_logging


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_format_fields(self):
        """Test records become one JSON object with service metadata."""
        record = logging.LogRecord(
            name="messenger.test", level=logging.INFO, pathname=__file__,
            lineno=10, msg="hello %s", args=("world",), exc_info=None,
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["service"] == "messenger"
        assert data["level"] == "INFO"
        assert data["logger"] == "messenger.test"
        assert data["message"] == "hello world"

    def test_context_is_included(self):
        """Test extra context is carried through."""
        record = logging.LogRecord(
            name="messenger.test", level=logging.INFO, pathname=__file__,
            lineno=10, msg="event", args=(), exc_info=None,
        )
        record.context = {"user_id": "u1"}

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"user_id": "u1"}


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_writes_json_to_file(self, tmp_path):
        """Test log lines land in the given file as JSON."""
        log_file = tmp_path / "logs" / "app.log"
        setup_logging(log_level="DEBUG", log_file=str(log_file))

        get_logger("messenger.test").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["message"] == "written"

        setup_logging(log_level="INFO", to_file=False)

    def test_stdout_only(self):
        """Test to_file=False configures a single console handler."""
        setup_logging(log_level="WARNING", to_file=False)

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1


class TestConfig:
    """Tests for configuration helpers."""

    def test_resolve_db_path_default(self):
        """Test the default database lives in the data directory."""
        assert config.resolve_db_path(None) == config.DEFAULT_DB_PATH

    def test_resolve_db_path_memory(self):
        """Test the in-memory marker passes through."""
        assert config.resolve_db_path(":memory:") == ":memory:"

    def test_resolve_db_path_relative(self):
        """Test relative paths are anchored at the project root."""
        assert config.resolve_db_path("03_data/x.json") == config.PROJECT_ROOT / "03_data/x.json"

    def test_resolve_db_path_absolute(self, tmp_path):
        """Test absolute paths are kept."""
        assert config.resolve_db_path(str(tmp_path / "db.json")) == Path(tmp_path / "db.json")

    def test_env_overrides(self, monkeypatch):
        """Test numeric and list settings read the environment."""
        monkeypatch.setenv("TOKEN_TTL_DAYS", "3")
        monkeypatch.setenv("BCRYPT_ROUNDS", "12")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

        assert config.token_ttl_days() == 3
        assert config.bcrypt_rounds() == 12
        assert config.cors_origins() == ["http://a.test", "http://b.test"]

    def test_defaults(self, monkeypatch):
        """Test defaults apply when the environment is silent."""
        for name in ("TOKEN_TTL_DAYS", "BCRYPT_ROUNDS", "CORS_ORIGINS"):
            monkeypatch.delenv(name, raising=False)

        assert config.token_ttl_days() == 7
        assert config.bcrypt_rounds() == 10
        assert config.cors_origins() == ["http://localhost:5173"]
