"""
Live membership list for one room.

A Roster is shared by every connection joined to its room. Broadcasts and
snapshots take the read side of the roster's lock; joins, leaves and
instrument changes take the write side, so a broadcast always iterates one
consistent membership.
"""

import logging
from typing import List, Optional, Tuple

from ...infrastructure.exceptions import NotFoundError
from ..protocol import (
    ClientConnectMessage,
    ClientRecord,
    ReceiveInfoMessage,
    ServerMessage,
    encode_server_message,
)
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)


class Roster:
    """Ordered, lock-guarded collection of the client records in one room."""

    def __init__(self, room_name: str = "") -> None:
        self.room_name = room_name
        self._members: List[ClientRecord] = []
        # Seats handed out by the room directory but not yet appended
        self._reserved = 0
        self._lock = ReadWriteLock()

    def __repr__(self) -> str:
        return (
            f"Roster(room_name={self.room_name!r}, members={len(self._members)}, "
            f"reserved={self._reserved})"
        )

    async def broadcast(self, message: ServerMessage, exclude_id: Optional[int]) -> int:
        """
        Encode ``message`` once and enqueue it for every member except ``exclude_id``.

        Returns the number of members the frame was handed to. A member whose
        delivery task has already stopped is skipped; it is on its way out.
        """
        frame = encode_server_message(message)
        async with self._lock.read():
            return self._fan_out(frame, exclude_id)

    def _fan_out(self, frame: bytes, exclude_id: Optional[int]) -> int:
        delivered = 0
        for member in self._members:
            if member.id == exclude_id or member.outbound is None:
                continue
            if member.outbound.send(frame):
                delivered += 1
            else:
                logger.debug(
                    f"Dropped frame for client {member.id} in room "
                    f"{self.room_name!r}: delivery already stopped"
                )
        return delivered

    async def append(self, record: ClientRecord) -> None:
        """Add a record at the end of the roster. Reserved seats are left alone."""
        async with self._lock.write():
            self._members.append(record)

    async def admit(self, record: ClientRecord) -> Tuple[ClientRecord, ...]:
        """
        Brief a new member and announce it, as one step.

        Sends ``ReceiveInfo`` (current members, without the newcomer) to the
        newcomer only, broadcasts ``ClientConnect`` to everybody else, then
        appends the record into the seat reserved for it by the room
        directory. Returns the briefing snapshot.

        Raises:
            ProtocolError: If either frame cannot be encoded; the roster is
                left unchanged.
        """
        async with self._lock.write():
            snapshot = tuple(member.copy() for member in self._members)
            briefing = encode_server_message(
                ReceiveInfoMessage(client_list=snapshot, created_client=record.copy())
            )
            announcement = encode_server_message(ClientConnectMessage(client=record.copy()))

            if record.outbound is not None:
                record.outbound.send(briefing)
            self._fan_out(announcement, record.id)
            self._members.append(record)
            if self._reserved > 0:
                self._reserved -= 1
            return snapshot

    async def remove_by_id(self, client_id: int) -> ClientRecord:
        """
        Remove and return the record with ``client_id``.

        Raises:
            NotFoundError: If no member has that id.
        """
        async with self._lock.write():
            index = self._index_of(client_id)
            return self._members.pop(index)

    async def update_instrument(self, client_id: int, instrument_name: str) -> None:
        """Change one member's instrument in place."""
        async with self._lock.write():
            self._members[self._index_of(client_id)].instrument_name = instrument_name

    def _index_of(self, client_id: int) -> int:
        for index, member in enumerate(self._members):
            if member.id == client_id:
                return index
        raise NotFoundError(
            f"No client with id {client_id} in room {self.room_name!r}"
        )

    async def snapshot(self) -> Tuple[ClientRecord, ...]:
        """Value copies of all current members, taken at one point in time."""
        async with self._lock.read():
            return tuple(member.copy() for member in self._members)

    async def size(self) -> int:
        """Current member count."""
        async with self._lock.read():
            return len(self._members)

    # Seat reservations, managed by the room directory under its own lock

    async def occupancy(self) -> int:
        """Members plus seats reserved for joins still being admitted."""
        async with self._lock.read():
            return len(self._members) + self._reserved

    async def reserve(self) -> None:
        async with self._lock.write():
            self._reserved += 1

    async def release_reservation(self) -> None:
        async with self._lock.write():
            if self._reserved > 0:
                self._reserved -= 1
