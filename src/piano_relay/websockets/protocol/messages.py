"""
Message variants exchanged over the relay websocket.

Two closed families exist: client messages (sent by a browser, relayed to
the rest of the room) and server messages (produced by the relay itself).
Every variant carries its wire tag in ``TYPE``.
"""

import struct
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Optional, Tuple, Union

from ...core.types import (
    WS_MSG_CLIENT_CONNECT,
    WS_MSG_CLIENT_DISCONNECT,
    WS_MSG_ERROR,
    WS_MSG_INSTRUMENT_CHANGE,
    WS_MSG_PLAY,
    WS_MSG_RECEIVE_INFO,
    WS_MSG_RELAY,
    WS_MSG_STOP,
)
from ...infrastructure.exceptions import ProtocolError

if TYPE_CHECKING:
    from ..server.outbound import OutboundDelivery


def to_float32(value: float) -> float:
    """Round a float to the nearest 32-bit float, as it travels on the wire."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except (OverflowError, struct.error) as e:
        raise ProtocolError(f"Value {value!r} does not fit a 32-bit float") from e


@dataclass
class ClientRecord:
    """A connected, admitted client as the rest of its room sees it."""

    id: int
    color_hue: int
    instrument_name: str
    # Queue feeding this client's websocket; never serialized
    outbound: Optional["OutboundDelivery"] = field(
        default=None, repr=False, compare=False
    )

    def copy(self) -> "ClientRecord":
        """Detached value copy, safe to hand out after the roster lock is released."""
        return ClientRecord(
            id=self.id,
            color_hue=self.color_hue,
            instrument_name=self.instrument_name,
        )


# Client -> server


@dataclass(frozen=True)
class PlayMessage:
    TYPE: ClassVar[str] = WS_MSG_PLAY

    note: str
    volume: float

    def __post_init__(self):
        object.__setattr__(self, "volume", to_float32(self.volume))


@dataclass(frozen=True)
class StopMessage:
    TYPE: ClassVar[str] = WS_MSG_STOP

    note: str
    sustain: bool


@dataclass(frozen=True)
class InstrumentChangeMessage:
    TYPE: ClassVar[str] = WS_MSG_INSTRUMENT_CHANGE

    instrument_name: str


ClientMessage = Union[PlayMessage, StopMessage, InstrumentChangeMessage]


# Server -> client


@dataclass(frozen=True)
class ErrorMessage:
    TYPE: ClassVar[str] = WS_MSG_ERROR

    error: str


@dataclass(frozen=True)
class ClientConnectMessage:
    TYPE: ClassVar[str] = WS_MSG_CLIENT_CONNECT

    client: ClientRecord


@dataclass(frozen=True)
class ReceiveInfoMessage:
    """Briefing sent to a newly admitted client only."""

    TYPE: ClassVar[str] = WS_MSG_RECEIVE_INFO

    client_list: Tuple[ClientRecord, ...]
    created_client: ClientRecord

    def __post_init__(self):
        object.__setattr__(self, "client_list", tuple(self.client_list))


@dataclass(frozen=True)
class ClientDisconnectMessage:
    TYPE: ClassVar[str] = WS_MSG_CLIENT_DISCONNECT

    id: int


@dataclass(frozen=True)
class RelayMessage:
    """A client message stamped with the id of the client that sent it."""

    TYPE: ClassVar[str] = WS_MSG_RELAY

    msg: ClientMessage
    id: int


ServerMessage = Union[
    ErrorMessage,
    ClientConnectMessage,
    ReceiveInfoMessage,
    ClientDisconnectMessage,
    RelayMessage,
]
