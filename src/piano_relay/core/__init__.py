"""
Core types and constants shared by every Piano Relay component.
"""

from .types import MAX_ROOM_NAME_LENGTH, MAX_ROOM_SIZE

__all__ = [
    "MAX_ROOM_NAME_LENGTH",
    "MAX_ROOM_SIZE",
]
