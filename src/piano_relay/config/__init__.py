"""
Configuration management for the Piano Relay server.

This package provides:
- The server configuration data structure
- Environment variable and ``.env`` file loading
- Default value management
"""

from .settings import ServerConfig, ConfigManager

__all__ = [
    "ServerConfig",
    "ConfigManager",
]
