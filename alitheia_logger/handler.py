"""
Standard Library Bridge
=======================

logging.Handler that forwards records to the remote logger, so existing code
using logging.getLogger() reaches the remote service without changes.

Usage:
    import logging
    from alitheia_logger.handler import RemoteLogHandler

    logging.getLogger("sqooss.updater").addHandler(RemoteLogHandler())
"""

import logging
import threading
from typing import Optional

from .transport.log_models import LogLevel
from .transport.remote_client import (
    FALLBACK_LOGGER_PREFIX,
    RemoteLoggerClient,
    get_remote_logger,
)
from .utils.data_utils import validate_channel_name

# Import configuration
from .config import config

# Records from these loggers would loop back into the handler
_IGNORED_PREFIXES = ("alitheia_logger", "urllib3", "requests", FALLBACK_LOGGER_PREFIX)


class RemoteLogHandler(logging.Handler):
    """
    Forwards standard library log records to a remote logger channel

    The channel is the fixed one given at construction, or the name of the
    logger that produced the record.
    """

    def __init__(self, channel: Optional[str] = None,
                 remote: Optional[RemoteLoggerClient] = None,
                 level: int = logging.NOTSET):
        super().__init__(level)
        if channel is not None and not validate_channel_name(channel):
            raise ValueError(f"Invalid channel name: {channel!r}")

        self.channel = channel
        self._remote = remote
        self._local = threading.local()

    @property
    def remote(self) -> RemoteLoggerClient:
        if self._remote is None:
            self._remote = get_remote_logger()
        return self._remote

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith(_IGNORED_PREFIXES):
            return
        if getattr(self._local, "emitting", False):
            return

        self._local.emitting = True
        try:
            channel = self.channel or self._channel_for(record.name)
            self.remote.log(channel, LogLevel.from_stdlib(record.levelno), self.format(record))
        except Exception:
            self.handleError(record)
        finally:
            self._local.emitting = False

    @staticmethod
    def _channel_for(logger_name: str) -> str:
        # Names such as "my app" or "a..b" cannot be channels
        if validate_channel_name(logger_name):
            return logger_name
        return config.DEFAULT_CHANNEL
