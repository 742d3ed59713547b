"""
Room name -> Roster directory.

A room exists exactly while somebody is in it: the first join creates its
roster and the last leave deletes it. Directory mutations are serialized by
one asyncio lock; traffic inside an existing room never touches it.
"""

import asyncio
import logging
from typing import Dict, Optional

from ...core.types import MAX_ROOM_NAME_LENGTH, MAX_ROOM_SIZE
from ...infrastructure.exceptions import (
    InvalidRoomNameError,
    NotFoundError,
    RoomFullError,
)
from ..protocol import ClientDisconnectMessage
from .roster import Roster

logger = logging.getLogger(__name__)


class RoomDirectory:
    """Process-wide registry of active rooms."""

    def __init__(
        self,
        max_room_size: int = MAX_ROOM_SIZE,
        max_room_name_length: int = MAX_ROOM_NAME_LENGTH,
    ) -> None:
        self.max_room_size = max_room_size
        self.max_room_name_length = max_room_name_length
        self._rooms: Dict[str, Roster] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, room_name: str) -> bool:
        return room_name in self._rooms

    def get(self, room_name: str) -> Optional[Roster]:
        return self._rooms.get(room_name)

    def room_count(self) -> int:
        return len(self._rooms)

    async def join_or_create(self, room_name: str, instrument_name: str) -> Roster:
        """
        Reserve a seat in ``room_name``, creating the room if needed.

        The caller must either append its record to the returned roster or
        give the seat back with ``cancel_join``.

        Raises:
            InvalidRoomNameError: If the room name is longer than allowed.
            RoomFullError: If the room already holds ``max_room_size`` clients.
        """
        if len(room_name) > self.max_room_name_length:
            raise InvalidRoomNameError(
                f"Room name too long (max {self.max_room_name_length} characters)"
            )

        async with self._lock:
            roster = self._rooms.get(room_name)
            created = roster is None
            if roster is None:
                roster = Roster(room_name)

            if await roster.occupancy() >= self.max_room_size:
                raise RoomFullError(
                    f"Room already has {self.max_room_size} people"
                )

            await roster.reserve()
            if created:
                self._rooms[room_name] = roster
                logger.info(f"Room created: {room_name!r}")

        logger.debug(f"Seat reserved in {room_name!r} for instrument {instrument_name!r}")
        return roster

    async def cancel_join(self, room_name: str, roster: Roster) -> None:
        """Give back a seat reserved by ``join_or_create`` that was never used."""
        async with self._lock:
            await roster.release_reservation()
            if self._rooms.get(room_name) is roster and await roster.occupancy() == 0:
                del self._rooms[room_name]
                logger.info(f"Room closed: {room_name!r}")

    async def leave_and_maybe_delete(self, room_name: str, client_id: int) -> None:
        """
        Remove ``client_id`` from its room.

        Deletes the room when nobody is left, otherwise tells the remaining
        members that the client disconnected.

        Raises:
            NotFoundError: If the room or the client is not registered.
        """
        async with self._lock:
            roster = self._rooms.get(room_name)
            if roster is None:
                raise NotFoundError(f"No room named {room_name!r}")

            await roster.remove_by_id(client_id)

            if await roster.occupancy() == 0:
                del self._rooms[room_name]
                logger.info(f"Room closed: {room_name!r}")
                return

        await roster.broadcast(ClientDisconnectMessage(id=client_id), exclude_id=client_id)

    async def get_stats(self) -> Dict[str, int]:
        """Get directory statistics."""
        rooms = list(self._rooms.values())
        clients = 0
        for roster in rooms:
            clients += await roster.size()
        return {
            "rooms": len(rooms),
            "clients": clients,
        }
