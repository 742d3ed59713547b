"""
Per-connection outbound delivery.

Every frame bound for one client goes through an unbounded FIFO queue that a
single writer task drains into the websocket. Producers never wait on a slow
peer: enqueueing is synchronous and never blocks.
"""

import asyncio
import logging
from typing import Optional

from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)

# Queue marker asking the writer to stop once everything before it is sent
_CLOSE = None


class OutboundDelivery:
    """Single writer draining a frame queue into one websocket."""

    def __init__(self, websocket, label: str = "") -> None:
        self.websocket = websocket
        self.label = label or str(getattr(websocket, "remote_address", ""))
        self._queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue()
        self._closing = False
        self._stopped = False
        self._task = asyncio.create_task(self._writer())

    @property
    def running(self) -> bool:
        return not self._stopped

    def pending(self) -> int:
        return self._queue.qsize()

    def send(self, frame: bytes) -> bool:
        """
        Enqueue one encoded frame.

        Returns False, dropping the frame, once the writer has stopped or a
        close was requested.
        """
        if self._closing or self._stopped:
            return False
        self._queue.put_nowait(frame)
        return True

    def close(self) -> None:
        """Stop the writer after the frames already queued have been written."""
        if self._closing:
            return
        self._closing = True
        self._queue.put_nowait(_CLOSE)

    async def wait_closed(self) -> None:
        await asyncio.shield(self._task)

    async def aclose(self, timeout: float = 5.0) -> None:
        """Close and wait for the writer, cancelling it if the peer stalls."""
        self.close()
        try:
            await asyncio.wait_for(self._task, timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Outbound writer for {self.label} timed out, cancelled")

    async def _writer(self) -> None:
        try:
            while True:
                frame = await self._queue.get()
                if frame is _CLOSE:
                    break
                try:
                    await self.websocket.send(frame)
                except ConnectionClosed:
                    logger.debug(f"Connection to {self.label} closed, ending writer task")
                    break
        except Exception:
            logger.exception(f"Error in writer task for {self.label}")
        finally:
            self._stopped = True
            dropped = self.pending()
            if dropped:
                logger.debug(f"Discarding {dropped} undelivered frames for {self.label}")
