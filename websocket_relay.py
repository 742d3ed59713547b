#!/usr/bin/env python3
"""
WebSocket Relay Server for Piano Relay.

This script starts the relay server that lets clients in the same room
hear each other's instrument events.
"""

import asyncio
import sys
from pathlib import Path

# Add the src directory to the Python path
src_dir = Path(__file__).parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from piano_relay.config import ConfigManager
from piano_relay.infrastructure import ConfigurationError
from piano_relay.websockets.server.relay_server import main


if __name__ == "__main__":
    try:
        config = ConfigManager().get_config()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        sys.exit(1)

    try:
        if not asyncio.run(main(config)):
            sys.exit(1)
    except KeyboardInterrupt:
        print("\nWebSocket Relay Server shutdown requested")
