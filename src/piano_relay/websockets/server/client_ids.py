"""
Process-unique client ids.
"""

import itertools

from ...core.types import FIRST_CLIENT_ID


class ClientIdAllocator:
    """Monotonic id source owned by the relay server; ids are never reused."""

    def __init__(self, start: int = FIRST_CLIENT_ID) -> None:
        self._counter = itertools.count(start)
        self.last_allocated = None

    def allocate(self) -> int:
        self.last_allocated = next(self._counter)
        return self.last_allocated
