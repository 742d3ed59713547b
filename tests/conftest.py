"""
Pytest configuration and shared fixtures for the Piano Relay test suite.

This module provides common fixtures and configuration for all tests.
"""

import pytest

from piano_relay.websockets.core import RoomDirectory
from piano_relay.websockets.server import ClientIdAllocator

from .helpers import FakeWebSocket, RecordingOutbound


@pytest.fixture
def recording_outbound():
    """Create an outbound stub that records frames."""
    return RecordingOutbound()


@pytest.fixture
def fake_websocket():
    """Create an in-memory websocket for testing."""
    return FakeWebSocket()


@pytest.fixture
def directory():
    """Create an empty room directory."""
    return RoomDirectory()


@pytest.fixture
def client_ids():
    """Create a fresh client id allocator."""
    return ClientIdAllocator()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
