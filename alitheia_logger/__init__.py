"""
Alitheia Remote Logger
======================

Client side of the Alitheia logging service: a small named logger facade
whose debug/info/warn/error calls are forwarded to a remote logger object
located through the naming service.

Author: Alitheia Core Team
Version: 1.0.0
"""

import logging

__version__ = "1.0.0"
__author__ = "Alitheia Core Team"

from .logger import Logger
from .handler import RemoteLogHandler
from .transport import (
    DeliveryPolicy,
    LogLevel,
    RemoteLoggerClient,
    get_remote_logger,
    reset_remote_logger,
)
from .utils import RemoteLoggingError, EndpointResolutionError, DeliveryError

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Logger",
    "RemoteLogHandler",
    "RemoteLoggerClient",
    "DeliveryPolicy",
    "LogLevel",
    "get_remote_logger",
    "reset_remote_logger",
    "RemoteLoggingError",
    "EndpointResolutionError",
    "DeliveryError",
]


def get_version():
    """Return the current version of the library"""
    return __version__


def get_info():
    """Return basic information about the library"""
    return {
        "name": "Alitheia Remote Logger",
        "version": __version__,
        "author": __author__,
        "description": "Named logger facade forwarding to a remote logging service"
    }
