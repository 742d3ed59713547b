"""
Custom exceptions for the Piano Relay server.

This module defines all custom exceptions used throughout the system,
providing clear error categorization and handling.
"""


class PianoRelayError(Exception):
    """Base exception for all Piano Relay related errors."""

    pass


class ConfigurationError(PianoRelayError):
    """Raised when there are configuration-related errors."""

    pass


class AdmissionError(PianoRelayError):
    """
    Raised when a connection cannot be admitted into a room.

    The message is user-visible: it is sent back to the client in an
    ``Error`` frame before the connection is closed.
    """

    pass


class InvalidRoomNameError(AdmissionError):
    """Raised when the requested room name is too long."""

    pass


class RoomFullError(AdmissionError):
    """Raised when the requested room is at capacity."""

    pass


class ProtocolError(PianoRelayError):
    """Raised when a frame cannot be encoded or decoded."""

    pass


class NotFoundError(PianoRelayError):
    """Raised when a client or room that should exist is missing."""

    pass
