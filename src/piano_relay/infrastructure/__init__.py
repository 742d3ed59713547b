"""
Infrastructure components for the Piano Relay server.

This package contains infrastructure concerns including:
- Logging configuration with environment-based levels
- Custom exception definitions
"""

from .logging import setup_logging, get_logger
from .logging_manager import (
    LoggingManager,
    Environment,
    is_production,
    get_environment,
)
from .exceptions import (
    PianoRelayError,
    ConfigurationError,
    AdmissionError,
    InvalidRoomNameError,
    RoomFullError,
    ProtocolError,
    NotFoundError,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "LoggingManager",
    "Environment",
    "is_production",
    "get_environment",
    # Exceptions
    "PianoRelayError",
    "ConfigurationError",
    "AdmissionError",
    "InvalidRoomNameError",
    "RoomFullError",
    "ProtocolError",
    "NotFoundError",
]
