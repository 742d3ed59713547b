"""
Test doubles shared by the Piano Relay test suite.
"""

import asyncio
from typing import Any, List

from websockets.exceptions import ConnectionClosed

from piano_relay.websockets.protocol import ClientRecord, decode_server_message

_END = object()


class RecordingOutbound:
    """Stand-in for OutboundDelivery that keeps every frame it accepts."""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.frames: List[bytes] = []

    def send(self, frame: bytes) -> bool:
        if not self.accept:
            return False
        self.frames.append(frame)
        return True

    def messages(self) -> List[Any]:
        return [decode_server_message(frame) for frame in self.frames]


class FakeWebSocket:
    """In-memory duplex websocket: tests feed inbound frames and read what was sent."""

    def __init__(self, remote_address=("127.0.0.1", 12345)):
        self.remote_address = remote_address
        self.sent: List[bytes] = []
        self.closed = False
        self.fail_sends = False
        self._inbound: asyncio.Queue = asyncio.Queue()

    async def send(self, frame: bytes) -> None:
        if self.fail_sends or self.closed:
            raise ConnectionClosed(None, None)
        self.sent.append(frame)

    async def close(self) -> None:
        self.hang_up()

    def feed(self, frame: Any) -> None:
        self._inbound.put_nowait(frame)

    def hang_up(self) -> None:
        """Simulate the peer closing the transport."""
        if not self.closed:
            self.closed = True
            self._inbound.put_nowait(_END)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._inbound.get()
        if item is _END:
            raise StopAsyncIteration
        return item

    def messages(self) -> List[Any]:
        return [decode_server_message(frame) for frame in self.sent]

    async def wait_for_frames(self, count: int, timeout: float = 1.0) -> List[Any]:
        async def _poll():
            while len(self.sent) < count:
                await asyncio.sleep(0.001)

        await asyncio.wait_for(_poll(), timeout)
        return self.messages()


def make_record(client_id: int, instrument: str = "acoustic_grand_piano", accept: bool = True):
    return ClientRecord(
        id=client_id,
        color_hue=(client_id * 37) % 360,
        instrument_name=instrument,
        outbound=RecordingOutbound(accept=accept),
    )


