"""
End-to-end tests: real websocket server, real websocket clients.
"""

import asyncio

import pytest
import pytest_asyncio
from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidStatus

from piano_relay.config import ServerConfig
from piano_relay.websockets.protocol import (
    ClientConnectMessage,
    ClientDisconnectMessage,
    ErrorMessage,
    PlayMessage,
    ReceiveInfoMessage,
    RelayMessage,
    decode_server_message,
    encode_client_message,
)
from piano_relay.websockets.server import RelayServer


@pytest_asyncio.fixture
async def relay_server():
    server = RelayServer(ServerConfig(host="127.0.0.1", port=0, ping_interval=None))
    assert await server.start()
    yield server
    await server.stop()


def _uri(server: RelayServer, room: str = "jam", instrument: str = "piano") -> str:
    return f"ws://127.0.0.1:{server.port}/?room_name={room}&instrument_name={instrument}"


async def _receive(websocket):
    return decode_server_message(await asyncio.wait_for(websocket.recv(), timeout=2))


class TestRelayServer:
    """Test cases for the running relay server."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_jam_session(self, relay_server):
        async with connect(_uri(relay_server, instrument="piano")) as a:
            info_a = await _receive(a)
            assert isinstance(info_a, ReceiveInfoMessage)
            assert info_a.client_list == ()
            a_id = info_a.created_client.id

            async with connect(_uri(relay_server, instrument="drums")) as b:
                info_b = await _receive(b)
                assert [record.id for record in info_b.client_list] == [a_id]
                b_record = info_b.created_client
                assert b_record.instrument_name == "drums"

                connect_msg = await _receive(a)
                assert connect_msg == ClientConnectMessage(client=b_record)

                await a.send(encode_client_message(PlayMessage(note="C4", volume=0.8)))
                relayed = await _receive(b)
                assert relayed == RelayMessage(msg=PlayMessage(note="C4", volume=0.8), id=a_id)

                with pytest.raises(asyncio.TimeoutError):
                    await asyncio.wait_for(a.recv(), timeout=0.1)

                await a.close()
                assert await _receive(b) == ClientDisconnectMessage(id=a_id)
                assert "jam" in relay_server.directory

        for _ in range(100):
            if "jam" not in relay_server.directory:
                break
            await asyncio.sleep(0.01)
        assert "jam" not in relay_server.directory

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_long_room_name_gets_error_then_close(self, relay_server):
        async with connect(_uri(relay_server, room="x" * 101)) as websocket:
            error = await _receive(websocket)
            assert isinstance(error, ErrorMessage)
            with pytest.raises(ConnectionClosed):
                await asyncio.wait_for(websocket.recv(), timeout=2)
        assert relay_server.directory.room_count() == 0

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_missing_query_is_refused_before_upgrade(self, relay_server):
        with pytest.raises(InvalidStatus) as exc_info:
            async with connect(f"ws://127.0.0.1:{relay_server.port}/?room_name=jam"):
                pass
        assert exc_info.value.response.status_code == 400
        assert relay_server.stats["rejected_requests"] == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_origin_allow_list(self):
        server = RelayServer(
            ServerConfig(
                host="127.0.0.1",
                port=0,
                ping_interval=None,
                cors_origin="https://piano.example",
            )
        )
        assert await server.start()
        try:
            with pytest.raises(InvalidStatus):
                async with connect(_uri(server), origin="https://evil.example"):
                    pass

            async with connect(_uri(server), origin="https://piano.example") as websocket:
                assert isinstance(await _receive(websocket), ReceiveInfoMessage)
        finally:
            await server.stop()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_stats(self, relay_server):
        async with connect(_uri(relay_server)) as websocket:
            await _receive(websocket)
            stats = await relay_server.get_stats()
            assert stats["server_running"] is True
            assert stats["rooms"] == 1
            assert stats["clients"] == 1
            assert stats["total_connections"] == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_serve_forever_returns_after_stop(self):
        server = RelayServer(ServerConfig(host="127.0.0.1", port=0, ping_interval=None))
        assert await server.start()

        serving = asyncio.create_task(server.serve_forever())
        await asyncio.sleep(0.01)
        assert not serving.done()

        await server.stop()
        await asyncio.wait_for(serving, timeout=2)
        assert server.port is None
