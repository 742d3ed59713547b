"""
Inbound message handler for an admitted connection.

Decodes each frame a client sends and relays it to the rest of the room,
stamped with the sender's id.
"""

import logging
from typing import Optional

from ....infrastructure.exceptions import ProtocolError
from ...core import Roster
from ...protocol import (
    ClientMessage,
    InstrumentChangeMessage,
    RelayMessage,
    decode_client_message,
)
from ...protocol.codec import Frame


class RelayMessageHandler:
    """Handles note and instrument messages from one client."""

    def __init__(self, roster: Roster, client_id: int, logger: logging.Logger) -> None:
        self.roster = roster
        self.client_id = client_id
        self.logger = logger

    async def process_frame(self, frame: Frame) -> Optional[ClientMessage]:
        """
        Decode and relay one frame.

        Malformed frames are logged and dropped; the connection stays open.
        Returns the relayed message, or None when nothing was relayed.
        """
        try:
            message = decode_client_message(frame)
        except ProtocolError as e:
            self.logger.warning(f"Dropped malformed frame from client {self.client_id}: {e}")
            return None

        if message is None:
            return None

        if isinstance(message, InstrumentChangeMessage):
            await self.roster.update_instrument(self.client_id, message.instrument_name)
            self.logger.debug(
                f"Client {self.client_id} switched to {message.instrument_name!r}"
            )

        await self.roster.broadcast(
            RelayMessage(msg=message, id=self.client_id),
            exclude_id=self.client_id,
        )
        return message
