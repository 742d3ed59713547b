"""
Logging management for the Piano Relay server.

The package ships a ``logging.yaml`` dictConfig. ``LoggingManager`` applies it
once per call to ``setup_logging`` after adjusting levels for the deployment
environment named by ``ENVIRONMENT``:

- development: DEBUG and above
- staging: INFO and above
- production: WARNING and above, ``piano_relay.*`` loggers clamped too

When the YAML file is missing or unreadable a single console handler is
attached to the requested logger instead.
"""

import copy
import logging
import logging.config
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

PACKAGE_LOGGER = "piano_relay"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "logging.yaml"

# Capped at WARNING whatever the environment; websockets logs every frame at DEBUG
THIRD_PARTY_LOGGERS = ("websockets", "asyncio")

BASIC_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Environment(Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "Environment":
        value = (value or "").strip().lower()
        if value in ("prod", "production"):
            return cls.PRODUCTION
        if value in ("stage", "staging"):
            return cls.STAGING
        return cls.DEVELOPMENT

    @property
    def default_level(self) -> str:
        return {
            Environment.DEVELOPMENT: "DEBUG",
            Environment.STAGING: "INFO",
            Environment.PRODUCTION: "WARNING",
        }[self]


class LoggingManager:
    """Applies the packaged logging configuration for one deployment environment."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environment: Optional[Environment] = None,
    ):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.environment = environment or Environment.from_value(os.getenv("ENVIRONMENT"))
        self._loaded: Optional[Dict[str, Any]] = None

    def get_environment(self) -> Environment:
        return self.environment

    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION

    def load(self) -> Optional[Dict[str, Any]]:
        """Read the YAML file once; ``None`` when it cannot be used."""
        if self._loaded is None and self.config_path.is_file():
            try:
                with self.config_path.open("r", encoding="utf-8") as f:
                    self._loaded = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                logging.getLogger(__name__).warning(
                    f"Ignoring logging config {self.config_path}: {e}"
                )
        return self._loaded

    def build_config(self, base: Dict[str, Any]) -> Dict[str, Any]:
        """
        Copy ``base`` and apply the environment's levels to it.

        Only production rewrites levels: the root and every package logger
        are raised to WARNING. Third-party loggers keep their configured level.
        """
        config = copy.deepcopy(base)
        if not self.is_production():
            return config

        level = self.environment.default_level
        config.setdefault("root", {})["level"] = level
        for name, logger_config in config.get("loggers", {}).items():
            if name.split(".")[0] not in THIRD_PARTY_LOGGERS:
                logger_config["level"] = level
        return config

    def setup_logging(self, component_name: str, log_level: Optional[str] = None) -> logging.Logger:
        """
        Configure logging and return the logger for ``component_name``.

        Args:
            component_name: Dotted logger name, usually under ``piano_relay``
            log_level: Explicit level for the component; defaults to the
                environment's level
        """
        level = (log_level or self.environment.default_level).upper()

        base = self.load()
        if base:
            logging.config.dictConfig(self.build_config(base))
            logger = logging.getLogger(component_name)
        else:
            logger = self._attach_console_handler(component_name)
        logger.setLevel(level)

        for name in THIRD_PARTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
        return logger

    def _attach_console_handler(self, component_name: str) -> logging.Logger:
        logger = logging.getLogger(component_name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(BASIC_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        return logger


_manager = LoggingManager()


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """Configure logging through the process-wide manager."""
    return _manager.setup_logging(component_name, log_level)


def get_logger(component_name: str) -> logging.Logger:
    return logging.getLogger(component_name)


def is_production() -> bool:
    return _manager.is_production()


def get_environment() -> Environment:
    return _manager.get_environment()
