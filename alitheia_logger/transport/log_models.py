"""
Data Models for the Remote Logger
=================================

Centralized data models shared by the client, the resolver and the facade.
Contains LogLevel, LogRecord, ObjectReference and DeliveryResult.

Author: Alitheia Core Team
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict

from ..utils.data_utils import format_datetime, get_source_identifier


class LogLevel(Enum):
    """Severities understood by the remote logger"""
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def stdlib_level(self) -> int:
        """Matching level of the standard library logging module"""
        return _STDLIB_LEVELS[self]

    @classmethod
    def from_stdlib(cls, levelno: int) -> "LogLevel":
        """
        Map a standard library level number to a remote severity

        CRITICAL folds into ERROR and anything below INFO into DEBUG.
        """
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass
class LogRecord:
    """
    A single message addressed to a remote logger channel

    Attributes:
        logger (str): Channel name the message is reported under
        level (LogLevel): Severity
        message (str): Sanitized message text
        timestamp (datetime): When the record was created (UTC)
        source (str): "host:pid" of the emitting process
    """
    logger: str
    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = field(default_factory=get_source_identifier)

    def to_payload(self) -> Dict:
        """JSON body sent to the remote logger"""
        return {
            "logger": self.logger,
            "level": self.level.value,
            "message": self.message,
            "timestamp": format_datetime(self.timestamp),
            "source": self.source,
        }


@dataclass(frozen=True)
class ObjectReference:
    """
    Reference to a remote object handed out by the naming service

    Attributes:
        name (str): Name the object is registered under
        url (str): Base URL of the object
        type_id (str): Interface identifier reported by the naming service
    """
    name: str
    url: str
    type_id: Optional[str] = None

    def endpoint(self, path: str) -> str:
        """Absolute URL of an operation on this object"""
        return f"{self.url.rstrip('/')}/{path.lstrip('/')}"


@dataclass
class DeliveryResult:
    """
    Outcome of handing one record to the remote logger

    Attributes:
        delivered (bool): Whether the remote logger accepted the record
        outcome (str): One of "sent", "buffered", "fallback", "dropped"
        attempts (int): Number of transport attempts made
        error (str): Last error message when not delivered
    """
    delivered: bool
    outcome: str
    attempts: int = 0
    error: Optional[str] = None


# Export classes for easy import
__all__ = ['LogLevel', 'LogRecord', 'ObjectReference', 'DeliveryResult']
