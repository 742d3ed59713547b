"""
Piano Relay - real-time websocket relay for shared piano rooms.

Clients join a named room over a websocket and every note or instrument
change they send is relayed to everybody else in the same room.

Architecture:
- Protocol: MessagePack wire codec and message variants
- Core: Rosters and the room directory shared by all connections
- Server: Connection lifecycle, outbound delivery and the relay server
- Config: Configuration management
- Infrastructure: Logging and exceptions
"""

__version__ = "1.0.0"

# Networking components
from .websockets.server import RelayServer, WebsocketConnection, JoinParams
from .websockets.core import Roster, RoomDirectory

# Configuration
from .config import ServerConfig, ConfigManager

# Infrastructure
from .infrastructure.logging import setup_logging, get_logger
from .infrastructure.exceptions import (
    PianoRelayError,
    ConfigurationError,
    AdmissionError,
    InvalidRoomNameError,
    RoomFullError,
    ProtocolError,
    NotFoundError,
)

__all__ = [
    # Version info
    "__version__",
    # Networking components
    "RelayServer",
    "WebsocketConnection",
    "JoinParams",
    "Roster",
    "RoomDirectory",
    # Configuration
    "ServerConfig",
    "ConfigManager",
    # Infrastructure
    "setup_logging",
    "get_logger",
    "PianoRelayError",
    "ConfigurationError",
    "AdmissionError",
    "InvalidRoomNameError",
    "RoomFullError",
    "ProtocolError",
    "NotFoundError",
]
