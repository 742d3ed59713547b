"""
Unit tests for logging setup.
"""

import logging

import pytest

from piano_relay.config import ServerConfig
from piano_relay.infrastructure import Environment, LoggingManager, setup_logging


BASE_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "loggers": {
        "piano_relay": {"level": "DEBUG"},
        "websockets": {"level": "ERROR"},
    },
    "root": {"level": "DEBUG"},
}


@pytest.fixture
def package_logger():
    """Restore the package logger level changed by a test."""
    logger = logging.getLogger("piano_relay")
    level = logger.level
    yield logger
    logger.setLevel(level)


class TestEnvironment:
    """Test cases for environment detection."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("production", Environment.PRODUCTION),
            ("PROD", Environment.PRODUCTION),
            ("stage", Environment.STAGING),
            ("anything-else", Environment.DEVELOPMENT),
            (None, Environment.DEVELOPMENT),
        ],
    )
    def test_from_value(self, value, expected):
        assert Environment.from_value(value) == expected

    @pytest.mark.unit
    def test_manager_reads_environment_variable(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "staging")
        manager = LoggingManager()
        assert manager.get_environment() == Environment.STAGING
        assert not manager.is_production()


class TestLoggingManager:
    """Test cases for LoggingManager."""

    @pytest.mark.unit
    def test_packaged_yaml_is_applied(self):
        logger = setup_logging("piano_relay.tests", log_level="INFO")
        assert logger.level == logging.INFO
        assert logging.getLogger("websockets").level == logging.WARNING

    @pytest.mark.unit
    def test_default_level_follows_environment(self):
        manager = LoggingManager(environment=Environment.STAGING)
        logger = manager.setup_logging("piano_relay.staging")
        assert logger.level == logging.INFO

    @pytest.mark.unit
    def test_falls_back_to_console_handler(self, tmp_path):
        manager = LoggingManager(
            config_path=tmp_path / "missing.yaml",
            environment=Environment.DEVELOPMENT,
        )

        logger = manager.setup_logging("piano_relay.fallback", log_level="ERROR")
        manager.setup_logging("piano_relay.fallback", log_level="ERROR")

        assert logger.level == logging.ERROR
        assert len(logger.handlers) == 1

    @pytest.mark.unit
    def test_production_clamps_package_loggers(self):
        manager = LoggingManager(environment=Environment.PRODUCTION)

        config = manager.build_config(BASE_CONFIG)

        assert config["root"]["level"] == "WARNING"
        assert config["loggers"]["piano_relay"]["level"] == "WARNING"
        assert config["loggers"]["websockets"]["level"] == "ERROR"
        # base config left untouched
        assert BASE_CONFIG["loggers"]["piano_relay"]["level"] == "DEBUG"

    @pytest.mark.unit
    def test_development_keeps_configured_levels(self):
        manager = LoggingManager(environment=Environment.DEVELOPMENT)
        assert manager.build_config(BASE_CONFIG) == BASE_CONFIG

    @pytest.mark.unit
    def test_production_applies_without_explicit_level(self, package_logger):
        manager = LoggingManager(environment=Environment.PRODUCTION)

        logger = manager.setup_logging("piano_relay", log_level=ServerConfig().log_level)

        assert logger is package_logger
        assert logger.getEffectiveLevel() >= logging.WARNING
        assert not logger.isEnabledFor(logging.INFO)

    @pytest.mark.unit
    def test_explicit_level_wins_in_production(self, package_logger):
        manager = LoggingManager(environment=Environment.PRODUCTION)

        logger = manager.setup_logging("piano_relay", log_level="DEBUG")

        assert logger.getEffectiveLevel() == logging.DEBUG
