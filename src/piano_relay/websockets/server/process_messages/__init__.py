"""
Message processing modules for the WebSocket relay server.
"""

from .relay_message import RelayMessageHandler

__all__ = [
    "RelayMessageHandler",
]
