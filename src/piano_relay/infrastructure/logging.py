"""
Logging entry points used across the relay.

Modules log through ``logging.getLogger(__name__)``; processes call
``setup_logging`` once at startup with the level resolved from their
configuration.
"""

import logging
from typing import Optional

from .logging_manager import PACKAGE_LOGGER
from .logging_manager import get_logger as _get_logger
from .logging_manager import setup_logging as _setup_logging


def setup_logging(
    component_name: str = PACKAGE_LOGGER,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging for a relay component.

    Args:
        component_name: Logger to return, e.g. ``piano_relay.websockets.server``
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. If None, the
            ``ENVIRONMENT`` level applies (development DEBUG, staging INFO,
            production WARNING).

    Returns:
        logging.Logger: The configured component logger
    """
    return _setup_logging(component_name, log_level)


def get_logger(component_name: str) -> logging.Logger:
    """Get a component logger without reconfiguring anything."""
    return _get_logger(component_name)
