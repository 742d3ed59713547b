"""
Common types and constants for the Piano Relay server.

This module centralizes limits, environment variable names and wire
message type tags to avoid hardcoding them throughout the codebase.
"""

from typing import Final

# Room limits
MAX_ROOM_NAME_LENGTH: Final[int] = 100
MAX_ROOM_SIZE: Final[int] = 25

# Client records
COLOR_HUE_RANGE: Final[int] = 360
FIRST_CLIENT_ID: Final[int] = 0

# Join query parameters
QUERY_ROOM_NAME: Final[str] = "room_name"
QUERY_INSTRUMENT_NAME: Final[str] = "instrument_name"

# Environment Variable Names (from .env file)
ENV_HOST: Final[str] = "HOST"
ENV_PORT: Final[str] = "PORT"
ENV_CORS_ORIGIN: Final[str] = "CORS_ORIGIN"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"
ENV_PING_INTERVAL: Final[str] = "PING_INTERVAL"

# WebSocket Message Types (client -> server)
WS_MSG_PLAY: Final[str] = "Play"
WS_MSG_STOP: Final[str] = "Stop"
WS_MSG_INSTRUMENT_CHANGE: Final[str] = "InstrumentChange"

# WebSocket Message Types (server -> client)
WS_MSG_ERROR: Final[str] = "Error"
WS_MSG_CLIENT_CONNECT: Final[str] = "ClientConnect"
WS_MSG_RECEIVE_INFO: Final[str] = "ReceiveInfo"
WS_MSG_CLIENT_DISCONNECT: Final[str] = "ClientDisconnect"
WS_MSG_RELAY: Final[str] = "Relay"

# Default Values
DEFAULT_HOST: Final[str] = "0.0.0.0"
DEFAULT_PORT: Final[int] = 5000
DEFAULT_PING_INTERVAL: Final[float] = 20.0
MAX_FRAME_SIZE: Final[int] = 2**20
