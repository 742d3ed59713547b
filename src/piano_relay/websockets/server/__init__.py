"""
WebSocket server implementation for the piano relay.

This module contains the RelayServer class and the per-connection
components it drives.
"""

from .client_ids import ClientIdAllocator
from .connection import ConnectionState, JoinParams, WebsocketConnection
from .outbound import OutboundDelivery
from .relay_server import RelayServer

__all__ = [
    "ClientIdAllocator",
    "ConnectionState",
    "JoinParams",
    "WebsocketConnection",
    "OutboundDelivery",
    "RelayServer",
]
