"""
Unit tests for the inbound relay message handler.
"""

import logging

import pytest
import pytest_asyncio

from piano_relay.websockets.core import Roster
from piano_relay.websockets.protocol import (
    InstrumentChangeMessage,
    PlayMessage,
    RelayMessage,
    StopMessage,
    encode_client_message,
)
from piano_relay.websockets.server.process_messages import RelayMessageHandler

from ...helpers import make_record

logger = logging.getLogger(__name__)


@pytest_asyncio.fixture
async def room():
    sender, peer = make_record(1, "piano"), make_record(2, "drums")
    roster = Roster("jam")
    await roster.append(sender)
    await roster.append(peer)
    return roster, sender, peer


class TestRelayMessageHandler:
    """Test cases for RelayMessageHandler."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_play_is_relayed_with_sender_id(self, room):
        roster, sender, peer = room
        handler = RelayMessageHandler(roster, sender.id, logger)

        relayed = await handler.process_frame(
            encode_client_message(PlayMessage(note="C4", volume=0.8))
        )

        assert relayed == PlayMessage(note="C4", volume=0.8)
        assert peer.outbound.messages() == [
            RelayMessage(msg=PlayMessage(note="C4", volume=0.8), id=1)
        ]
        assert sender.outbound.frames == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stop_is_relayed(self, room):
        roster, sender, peer = room
        handler = RelayMessageHandler(roster, sender.id, logger)

        await handler.process_frame(
            encode_client_message(StopMessage(note="C4", sustain=True))
        )

        assert peer.outbound.messages() == [
            RelayMessage(msg=StopMessage(note="C4", sustain=True), id=1)
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_instrument_change_updates_record_then_relays(self, room):
        roster, sender, peer = room
        handler = RelayMessageHandler(roster, sender.id, logger)

        await handler.process_frame(
            encode_client_message(InstrumentChangeMessage(instrument_name="violin"))
        )

        names = {r.id: r.instrument_name for r in await roster.snapshot()}
        assert names == {1: "violin", 2: "drums"}
        assert peer.outbound.messages() == [
            RelayMessage(msg=InstrumentChangeMessage(instrument_name="violin"), id=1)
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_frame_is_ignored(self, room):
        roster, sender, peer = room
        handler = RelayMessageHandler(roster, sender.id, logger)
        assert await handler.process_frame(b"") is None
        assert peer.outbound.frames == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_frame_is_dropped(self, room):
        roster, sender, peer = room
        handler = RelayMessageHandler(roster, sender.id, logger)

        assert await handler.process_frame(b"\xc1garbage") is None
        assert peer.outbound.frames == []

        await handler.process_frame(encode_client_message(PlayMessage(note="D4", volume=0.5)))
        assert len(peer.outbound.frames) == 1
