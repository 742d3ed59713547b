"""
Wire protocol for the relay websocket: message variants and their
MessagePack encoding.
"""

from .messages import (
    ClientRecord,
    ClientMessage,
    PlayMessage,
    StopMessage,
    InstrumentChangeMessage,
    ServerMessage,
    ErrorMessage,
    ClientConnectMessage,
    ReceiveInfoMessage,
    ClientDisconnectMessage,
    RelayMessage,
)
from .codec import (
    encode_client_message,
    decode_client_message,
    encode_server_message,
    decode_server_message,
)

__all__ = [
    "ClientRecord",
    "ClientMessage",
    "PlayMessage",
    "StopMessage",
    "InstrumentChangeMessage",
    "ServerMessage",
    "ErrorMessage",
    "ClientConnectMessage",
    "ReceiveInfoMessage",
    "ClientDisconnectMessage",
    "RelayMessage",
    "encode_client_message",
    "decode_client_message",
    "encode_server_message",
    "decode_server_message",
]
