"""
MessagePack wire codec for relay messages.

Every frame is one msgpack map tagged by a ``"type"`` key. Field names are
snake_case and match what the browser client reads::

    {"type": "Play", "note": "C4", "volume": 0.8}
    {"type": "Relay", "msg": {"type": "Play", ...}, "id": 3}
    {"type": "ReceiveInfo", "client_list": [...], "created_client": {...}}

Decoding an empty frame yields ``None`` (nothing to do). Anything else that
is not a well-formed variant raises ``ProtocolError``.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, Union

import msgpack

from ...infrastructure.exceptions import ProtocolError
from .messages import (
    ClientConnectMessage,
    ClientDisconnectMessage,
    ClientMessage,
    ClientRecord,
    ErrorMessage,
    InstrumentChangeMessage,
    PlayMessage,
    ReceiveInfoMessage,
    RelayMessage,
    ServerMessage,
    StopMessage,
)

Frame = Union[bytes, bytearray, memoryview, str]


def _pack(payload: Dict[str, Any]) -> bytes:
    try:
        return msgpack.packb(payload, use_bin_type=True, use_single_float=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise ProtocolError(f"Failed to encode message: {e}") from e


def _unpack(data: Frame) -> Dict[str, Any]:
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        payload = msgpack.unpackb(bytes(data), raw=False)
    except (msgpack.UnpackException, ValueError, TypeError) as e:
        raise ProtocolError(f"Malformed frame: {e}") from e
    if not isinstance(payload, dict):
        raise ProtocolError(f"Expected a map, got {type(payload).__name__}")
    return payload


def _field(data: Mapping[str, Any], key: str, kind: Union[Type, Tuple[Type, ...]]) -> Any:
    if key not in data:
        raise ProtocolError(f"Missing field '{key}'")
    value = data[key]
    # bool is an int subclass; only accept it where bool is asked for
    if isinstance(value, bool) and kind is not bool:
        raise ProtocolError(f"Field '{key}' has wrong type bool")
    if not isinstance(value, kind):
        raise ProtocolError(f"Field '{key}' has wrong type {type(value).__name__}")
    return value


def _tag(data: Mapping[str, Any]) -> str:
    return _field(data, "type", str)


# Client records


def record_to_wire(record: ClientRecord) -> Dict[str, Any]:
    return {
        "color_hue": record.color_hue,
        "id": record.id,
        "instrument_name": record.instrument_name,
    }


def record_from_wire(data: Any) -> ClientRecord:
    if not isinstance(data, dict):
        raise ProtocolError("Client record must be a map")
    return ClientRecord(
        id=_field(data, "id", int),
        color_hue=_field(data, "color_hue", int),
        instrument_name=_field(data, "instrument_name", str),
    )


# Client messages


def client_message_to_wire(message: ClientMessage) -> Dict[str, Any]:
    if isinstance(message, PlayMessage):
        body = {"note": message.note, "volume": message.volume}
    elif isinstance(message, StopMessage):
        body = {"note": message.note, "sustain": message.sustain}
    elif isinstance(message, InstrumentChangeMessage):
        body = {"instrument_name": message.instrument_name}
    else:
        raise ProtocolError(f"Not a client message: {type(message).__name__}")
    return {"type": message.TYPE, **body}


def _play_from_wire(data: Mapping[str, Any]) -> PlayMessage:
    return PlayMessage(
        note=_field(data, "note", str),
        volume=float(_field(data, "volume", (int, float))),
    )


def _stop_from_wire(data: Mapping[str, Any]) -> StopMessage:
    return StopMessage(
        note=_field(data, "note", str),
        sustain=_field(data, "sustain", bool),
    )


def _instrument_change_from_wire(data: Mapping[str, Any]) -> InstrumentChangeMessage:
    return InstrumentChangeMessage(
        instrument_name=_field(data, "instrument_name", str),
    )


_CLIENT_DECODERS: Dict[str, Callable[[Mapping[str, Any]], ClientMessage]] = {
    PlayMessage.TYPE: _play_from_wire,
    StopMessage.TYPE: _stop_from_wire,
    InstrumentChangeMessage.TYPE: _instrument_change_from_wire,
}


def client_message_from_wire(data: Any) -> ClientMessage:
    if not isinstance(data, dict):
        raise ProtocolError("Client message must be a map")
    tag = _tag(data)
    decoder = _CLIENT_DECODERS.get(tag)
    if decoder is None:
        raise ProtocolError(f"Unknown client message type: {tag}")
    return decoder(data)


# Server messages


def server_message_to_wire(message: ServerMessage) -> Dict[str, Any]:
    if isinstance(message, ErrorMessage):
        body = {"error": message.error}
    elif isinstance(message, ClientConnectMessage):
        body = record_to_wire(message.client)
    elif isinstance(message, ReceiveInfoMessage):
        body = {
            "client_list": [record_to_wire(record) for record in message.client_list],
            "created_client": record_to_wire(message.created_client),
        }
    elif isinstance(message, ClientDisconnectMessage):
        body = {"id": message.id}
    elif isinstance(message, RelayMessage):
        body = {"msg": client_message_to_wire(message.msg), "id": message.id}
    else:
        raise ProtocolError(f"Not a server message: {type(message).__name__}")
    return {"type": message.TYPE, **body}


def _receive_info_from_wire(data: Mapping[str, Any]) -> ReceiveInfoMessage:
    client_list = _field(data, "client_list", list)
    return ReceiveInfoMessage(
        client_list=tuple(record_from_wire(item) for item in client_list),
        created_client=record_from_wire(_field(data, "created_client", dict)),
    )


_SERVER_DECODERS: Dict[str, Callable[[Mapping[str, Any]], ServerMessage]] = {
    ErrorMessage.TYPE: lambda data: ErrorMessage(error=_field(data, "error", str)),
    ClientConnectMessage.TYPE: lambda data: ClientConnectMessage(
        client=record_from_wire(data)
    ),
    ReceiveInfoMessage.TYPE: _receive_info_from_wire,
    ClientDisconnectMessage.TYPE: lambda data: ClientDisconnectMessage(
        id=_field(data, "id", int)
    ),
    RelayMessage.TYPE: lambda data: RelayMessage(
        msg=client_message_from_wire(_field(data, "msg", dict)),
        id=_field(data, "id", int),
    ),
}


def server_message_from_wire(data: Any) -> ServerMessage:
    if not isinstance(data, dict):
        raise ProtocolError("Server message must be a map")
    tag = _tag(data)
    decoder = _SERVER_DECODERS.get(tag)
    if decoder is None:
        raise ProtocolError(f"Unknown server message type: {tag}")
    return decoder(data)


# Frames


def encode_client_message(message: ClientMessage) -> bytes:
    """Encode a client message into one binary frame."""
    return _pack(client_message_to_wire(message))


def decode_client_message(data: Frame) -> Optional[ClientMessage]:
    """Decode one inbound frame; ``None`` for an empty frame."""
    if not data:
        return None
    return client_message_from_wire(_unpack(data))


def encode_server_message(message: ServerMessage) -> bytes:
    """Encode a server message into one binary frame."""
    return _pack(server_message_to_wire(message))


def decode_server_message(data: Frame) -> Optional[ServerMessage]:
    """Decode one outbound frame; ``None`` for an empty frame."""
    if not data:
        return None
    return server_message_from_wire(_unpack(data))
