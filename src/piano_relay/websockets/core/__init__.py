"""
Shared room state for the relay server: rosters, the room directory and
the lock that guards each roster.
"""

from .locks import ReadWriteLock
from .roster import Roster
from .room_directory import RoomDirectory

__all__ = [
    "ReadWriteLock",
    "Roster",
    "RoomDirectory",
]
