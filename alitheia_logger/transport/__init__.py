"""
Transport Module
===============

Everything between the facade and the remote logging service:
object lookup through the naming service, the HTTP client, delivery
policies and the records that travel over the wire.

Author: Alitheia Core Team
"""

# Version info
__version__ = "1.0.0"
__module_name__ = "transport"

from .log_models import LogLevel, LogRecord, ObjectReference, DeliveryResult
from .delivery import DeliveryPolicy, PendingBuffer
from .resolver import ObjectResolver
from .remote_client import (
    RemoteLoggerClient,
    get_remote_logger,
    set_remote_logger,
    reset_remote_logger,
)

# Define public API
__all__ = [
    # Main classes
    "RemoteLoggerClient",
    "ObjectResolver",
    "PendingBuffer",
    "DeliveryPolicy",

    # Data models
    "LogLevel",
    "LogRecord",
    "ObjectReference",
    "DeliveryResult",

    # Shared client
    "get_remote_logger",
    "set_remote_logger",
    "reset_remote_logger",
]
