"""Unit tests for configuration loading and the unified logger."""

import logging
from pathlib import Path

import pytest

from feedmee.config import ServerConfig, get_config, load_config, reset_config
from feedmee.errors import ErrorKind, NetworkError, ScrapeEmptyResult
from feedmee.log_system.unified_logger import UnifiedLogger


ENV_VARS = [
    "FEEDMEE_SERVER_NAME",
    "FEEDMEE_LOG_LEVEL",
    "FEEDMEE_DATA_DIR",
    "FEEDMEE_DB_PATH",
    "FEEDMEE_LOG_FILE",
    "FEEDMEE_FETCH_TIMEOUT",
    "FEEDMEE_MIN_CONTENT_LENGTH",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield monkeypatch
    reset_config()


class TestConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, clean_env):
        config = load_config()

        assert config.name == "feedmee"
        assert config.log_level == "INFO"
        assert config.data_dir == Path.home() / ".feedmee"
        assert config.db_path == config.data_dir / "feedmee.sqlite"
        assert config.log_file == config.data_dir / "feedmee.log"
        assert config.fetch_timeout == 10.0
        assert config.min_content_length == 25

    def test_environment_overrides(self, clean_env, tmp_path):
        clean_env.setenv("FEEDMEE_DATA_DIR", str(tmp_path))
        clean_env.setenv("FEEDMEE_LOG_LEVEL", "debug")
        clean_env.setenv("FEEDMEE_FETCH_TIMEOUT", "2.5")
        clean_env.setenv("FEEDMEE_MIN_CONTENT_LENGTH", "100")

        config = load_config()

        assert config.db_path == tmp_path / "feedmee.sqlite"
        assert config.log_level == "DEBUG"
        assert config.fetch_timeout == 2.5
        assert config.min_content_length == 100

    def test_explicit_db_path(self, clean_env, tmp_path):
        clean_env.setenv("FEEDMEE_DB_PATH", str(tmp_path / "other.db"))

        assert load_config().db_path == tmp_path / "other.db"

    def test_invalid_number(self, clean_env):
        clean_env.setenv("FEEDMEE_FETCH_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="FEEDMEE_FETCH_TIMEOUT"):
            load_config()

    def test_get_config_is_cached(self, clean_env):
        assert get_config() is get_config()


class TestUnifiedLogger:
    """Tests for logger setup."""

    def test_get_logger_namespacing(self):
        assert UnifiedLogger.get_logger("feedmee.services.scraper").name == "feedmee.services.scraper"
        assert UnifiedLogger.get_logger("tests").name == "feedmee.tests"
        assert UnifiedLogger.get_logger().name == "feedmee"

    def test_initialize_writes_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "feedmee.log"
        config = ServerConfig(data_dir=tmp_path, log_file=log_file, log_level="INFO")

        UnifiedLogger.initialize_default(config)
        try:
            UnifiedLogger.get_logger("feedmee.test").info("hello from the test")
            assert UnifiedLogger.is_initialized()
        finally:
            UnifiedLogger.close()

        assert "hello from the test" in log_file.read_text()
        assert not UnifiedLogger.is_initialized()
        assert logging.getLogger("feedmee").handlers == []


class TestErrors:
    """Tests for the error taxonomy."""

    def test_error_kind_and_detail(self):
        error = NetworkError("Failed to fetch https://example.com/")

        assert error.kind == ErrorKind.NETWORK
        assert error.detail == "Failed to fetch https://example.com/"
        assert str(error) == "network: Failed to fetch https://example.com/"

    def test_to_dict(self):
        assert ScrapeEmptyResult("No articles found").to_dict() == {
            "error_kind": "scrape_empty",
            "error": "No articles found",
        }
