"""
Configuration management for the Piano Relay server.

Settings are resolved once at startup from the process environment and an
optional ``.env`` file, then handed to the relay server.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from ..core.types import (
    DEFAULT_HOST,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PORT,
    ENV_CORS_ORIGIN,
    ENV_HOST,
    ENV_LOG_LEVEL,
    ENV_PING_INTERVAL,
    ENV_PORT,
    MAX_ROOM_NAME_LENGTH,
    MAX_ROOM_SIZE,
)
from ..infrastructure.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    """Configuration for the relay server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    # Allowed browser origin; None accepts any origin
    cors_origin: Optional[str] = None

    # None lets the ENVIRONMENT level apply (development DEBUG, production WARNING)
    log_level: Optional[str] = None
    ping_interval: Optional[float] = DEFAULT_PING_INTERVAL

    max_room_size: int = MAX_ROOM_SIZE
    max_room_name_length: int = MAX_ROOM_NAME_LENGTH

    def __post_init__(self):
        """Post-initialization validation."""
        if not 0 <= self.port <= 65535:
            raise ConfigurationError(f"Port out of range: {self.port}")
        if self.max_room_size < 1:
            raise ConfigurationError("max_room_size must be at least 1")
        if self.log_level is not None and self.log_level.upper() not in (
            "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
        ):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")

    @property
    def origins(self):
        """Origin allow-list in the form ``websockets.serve`` expects."""
        if self.cors_origin is None:
            return None
        # Requests without an Origin header are not browser requests
        return [self.cors_origin, None]


class ConfigManager:
    """Environment-backed configuration manager."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to environment file
        """
        self.env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from file."""
        if os.path.exists(self.env_file_path):
            load_dotenv(dotenv_path=self.env_file_path)
            logger.info(f"Loaded environment from {self.env_file_path}")
        else:
            logger.warning(f"Environment file {self.env_file_path} not found")

    def _get_optional_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get optional environment variable.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            Environment variable value or default
        """
        return os.getenv(key, default)

    def _get_port(self) -> int:
        """Get the listen port, falling back to the default when unusable."""
        raw = self._get_optional_env(ENV_PORT)
        if raw is None:
            return DEFAULT_PORT
        try:
            port = int(raw)
        except ValueError:
            logger.warning(f"Invalid {ENV_PORT}={raw!r}, using {DEFAULT_PORT}")
            return DEFAULT_PORT
        if not 0 <= port <= 65535:
            logger.warning(f"{ENV_PORT}={port} out of range, using {DEFAULT_PORT}")
            return DEFAULT_PORT
        return port

    def _get_ping_interval(self) -> Optional[float]:
        raw = self._get_optional_env(ENV_PING_INTERVAL)
        if raw is None:
            return DEFAULT_PING_INTERVAL
        if raw.lower() in ("", "none", "off"):
            return None
        try:
            return float(raw)
        except ValueError:
            logger.warning(
                f"Invalid {ENV_PING_INTERVAL}={raw!r}, using {DEFAULT_PING_INTERVAL}"
            )
            return DEFAULT_PING_INTERVAL

    def _get_log_level(self) -> Optional[str]:
        raw = self._get_optional_env(ENV_LOG_LEVEL)
        if not raw:
            return None
        return raw.upper()

    def get_config(self) -> ServerConfig:
        """
        Get the server configuration.

        Returns:
            ServerConfig: Server configuration

        Raises:
            ConfigurationError: If a value is present but invalid
        """
        try:
            config = ServerConfig(
                host=self._get_optional_env(ENV_HOST, DEFAULT_HOST),
                port=self._get_port(),
                cors_origin=self._get_optional_env(ENV_CORS_ORIGIN) or None,
                log_level=self._get_log_level(),
                ping_interval=self._get_ping_interval(),
            )
        except ConfigurationError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

        logger.info(f"Using cors origin: {config.cors_origin or '*'}")
        logger.info("Configuration loaded successfully")
        return config
