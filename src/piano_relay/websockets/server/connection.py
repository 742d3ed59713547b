"""
Connection lifecycle for one relay websocket.

A connection walks through ``CONNECTING -> ADMITTED -> RELAYING ->
DISCONNECTING -> CLOSED``. A connection refused at admission goes straight
from ``CONNECTING`` to ``CLOSED`` after an ``Error`` frame is queued for it.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from websockets.exceptions import ConnectionClosed

from ...core.types import COLOR_HUE_RANGE, QUERY_INSTRUMENT_NAME, QUERY_ROOM_NAME
from ...infrastructure.exceptions import AdmissionError, ProtocolError
from ..core import RoomDirectory, Roster
from ..protocol import ClientRecord, ErrorMessage, ServerMessage, encode_server_message
from .client_ids import ClientIdAllocator
from .outbound import OutboundDelivery
from .process_messages import RelayMessageHandler

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    CONNECTING = "connecting"
    ADMITTED = "admitted"
    RELAYING = "relaying"
    DISCONNECTING = "disconnecting"
    CLOSED = "closed"


@dataclass(frozen=True)
class JoinParams:
    """Join request carried in the upgrade request's query string."""

    room_name: str
    instrument_name: str

    @classmethod
    def from_path(cls, path: str) -> "JoinParams":
        """
        Parse ``/?room_name=...&instrument_name=...``.

        Raises:
            ProtocolError: If either parameter is missing.
        """
        query = parse_qs(urlsplit(path).query, keep_blank_values=True)
        values = {}
        for key in (QUERY_ROOM_NAME, QUERY_INSTRUMENT_NAME):
            if key not in query:
                raise ProtocolError(f"Missing query parameter '{key}'")
            values[key] = query[key][0]
        return cls(
            room_name=values[QUERY_ROOM_NAME],
            instrument_name=values[QUERY_INSTRUMENT_NAME],
        )


class WebsocketConnection:
    """Drives one client from admission to teardown."""

    def __init__(
        self,
        websocket,
        params: JoinParams,
        directory: RoomDirectory,
        client_ids: ClientIdAllocator,
    ) -> None:
        self.websocket = websocket
        self.params = params
        self.directory = directory
        self.client_ids = client_ids
        self.address = getattr(websocket, "remote_address", None)

        # Writer starts before admission so an admission error can be delivered
        self.outbound = OutboundDelivery(websocket, label=str(self.address))

        self.state = ConnectionState.CONNECTING
        self.id: Optional[int] = None
        self.record: Optional[ClientRecord] = None
        self.roster: Optional[Roster] = None

    async def handle_connection(self) -> None:
        """Run the connection until the transport closes. Never raises."""
        logger.info(
            f"Websocket client connected from {self.address} "
            f"(room={self.params.room_name!r})"
        )

        try:
            await self._admit()
        except (AdmissionError, ProtocolError) as e:
            logger.error(f"Websocket client from {self.address} rejected: {e}")
            self.send_message(ErrorMessage(error=str(e)))
            await self._close()
            return
        except Exception as e:
            logger.error(f"Admission failed for {self.address}: {e}", exc_info=True)
            self.send_message(ErrorMessage(error="Internal server error"))
            await self._close()
            return

        try:
            await self._relay()
            logger.info(f"Websocket client disconnected (id={self.id})")
        except ConnectionClosed as e:
            logger.info(f"Websocket client disconnected (id={self.id}): {e}")
        except Exception as e:
            logger.error(
                f"Websocket client disconnected with error (id={self.id}): {e}",
                exc_info=True,
            )
        finally:
            await self._disconnect()
            await self._close()

    async def _admit(self) -> None:
        room_name = self.params.room_name
        roster = await self.directory.join_or_create(room_name, self.params.instrument_name)
        self.state = ConnectionState.ADMITTED

        self.id = self.client_ids.allocate()
        self.record = ClientRecord(
            id=self.id,
            color_hue=random.randrange(COLOR_HUE_RANGE),
            instrument_name=self.params.instrument_name,
            outbound=self.outbound,
        )

        try:
            await roster.admit(self.record)
        except BaseException:
            await self.directory.cancel_join(room_name, roster)
            raise

        self.roster = roster
        logger.info(f"Client {self.id} joined room {room_name!r}")

    async def _relay(self) -> None:
        self.state = ConnectionState.RELAYING
        handler = RelayMessageHandler(self.roster, self.id, logger)
        async for frame in self.websocket:
            await handler.process_frame(frame)

    async def _disconnect(self) -> None:
        self.state = ConnectionState.DISCONNECTING
        if self.roster is None:
            return
        try:
            await self.directory.leave_and_maybe_delete(self.params.room_name, self.id)
        except Exception as e:
            logger.error(f"Failed to remove client {self.id} from room: {e}")

    async def _close(self) -> None:
        await self.outbound.aclose()
        try:
            await self.websocket.close()
        except Exception as e:
            logger.debug(f"Error closing websocket for {self.address}: {e}")
        self.state = ConnectionState.CLOSED

    def send_message(self, message: ServerMessage) -> bool:
        """Queue a message for this client only."""
        try:
            frame = encode_server_message(message)
        except ProtocolError as e:
            logger.error(f"Failed to encode {type(message).__name__}: {e}")
            return False
        return self.outbound.send(frame)
