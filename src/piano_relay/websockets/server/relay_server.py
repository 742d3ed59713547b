"""
WebSocket relay server for shared piano rooms.

Accepts websocket upgrades carrying ``room_name`` and ``instrument_name``
query parameters and hands each accepted connection to a
``WebsocketConnection``, which manages it until it closes.
"""

import asyncio
import sys
from http import HTTPStatus
from typing import Any, Dict, Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.http11 import Request, Response

from ...config import ConfigManager, ServerConfig
from ...core.types import MAX_FRAME_SIZE
from ...infrastructure import ConfigurationError, ProtocolError, get_logger, setup_logging
from ..core import RoomDirectory
from .client_ids import ClientIdAllocator
from .connection import JoinParams, WebsocketConnection

logger = get_logger(__name__)


class RelayServer:
    """Websocket server relaying instrument events between room members."""

    def __init__(self, config: Optional[ServerConfig] = None) -> None:
        """Initialize the relay server."""
        self.config = config or ServerConfig()
        self.server: Optional[Server] = None

        self.directory = RoomDirectory(
            max_room_size=self.config.max_room_size,
            max_room_name_length=self.config.max_room_name_length,
        )
        self.client_ids = ClientIdAllocator()

        self.stats = {
            "total_connections": 0,
            "rejected_requests": 0,
        }

    @property
    def port(self) -> Optional[int]:
        """Port actually bound, useful when configured with port 0."""
        if self.server is None:
            return None
        for sock in self.server.sockets:
            return sock.getsockname()[1]
        return None

    async def start(self) -> bool:
        """Start the relay server."""
        try:
            self.server = await serve(
                self._handle_connection,
                self.config.host,
                self.config.port,
                origins=self.config.origins,
                process_request=self._process_request,
                ping_interval=self.config.ping_interval,
                max_size=MAX_FRAME_SIZE,
                compression=None,  # No compression for low latency
            )
            logger.info(f"Started websocket server on {self.config.host}:{self.port}")
            return True
        except OSError as e:
            logger.error(f"Failed to start relay server: {e}", exc_info=True)
            return False

    async def stop(self) -> None:
        """Stop the relay server."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            logger.info("Relay server stopped")

    async def serve_forever(self) -> None:
        """Block until the server is stopped or the calling task is cancelled."""
        if self.server is None:
            raise RuntimeError("Relay server is not started")
        await self.server.wait_closed()

    def _process_request(
        self, connection: ServerConnection, request: Request
    ) -> Optional[Response]:
        """Refuse upgrades that do not carry a complete join request."""
        try:
            JoinParams.from_path(request.path)
        except ProtocolError as e:
            self.stats["rejected_requests"] += 1
            logger.warning(f"Rejected upgrade from {connection.remote_address}: {e}")
            return connection.respond(HTTPStatus.BAD_REQUEST, f"{e}\n")
        return None

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        """Handle one accepted websocket until it closes."""
        self.stats["total_connections"] += 1
        params = JoinParams.from_path(websocket.request.path)
        connection = WebsocketConnection(websocket, params, self.directory, self.client_ids)
        await connection.handle_connection()

    async def get_stats(self) -> Dict[str, Any]:
        """Get server statistics."""
        return {
            "server_running": self.server is not None,
            **self.stats,
            **await self.directory.get_stats(),
        }


async def main(config: Optional[ServerConfig] = None) -> bool:
    """Run the relay server until cancelled."""
    if config is None:
        config = ConfigManager().get_config()
    setup_logging(component_name="piano_relay", log_level=config.log_level)

    server = RelayServer(config)
    try:
        if not await server.start():
            return False
        logger.info("Relay server running. Press Ctrl+C to stop.")
        await server.serve_forever()
    finally:
        await server.stop()
    return True


def run() -> None:
    """Console entry point."""
    try:
        ok = asyncio.run(main())
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down relay server...")
        return
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    run()
