"""
Message and Channel Utilities
=============================

Validation and processing helpers for log messages and channel names.

Functions:
    sanitize_message: Coerce, clean and truncate a log message
    validate_channel_name: Check a dot separated channel name
    parse_json_safely: Safe JSON parsing with error handling
    format_datetime: Format timestamps for the wire
    get_source_identifier: Identify the emitting process

Author: Alitheia Core Team
"""

import re
import json
import os
import socket
import logging
from typing import Any, Optional, Union
from datetime import datetime, date, timezone

# Import configuration
from ..config import config


# Module logger
logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "...[truncated]"

# Control characters other than tab and newline
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b-\x1f\x7f]')
_CHANNEL_NAME = re.compile(r'^[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)*$')


def sanitize_message(message: Any, max_length: int = None) -> str:
    """
    Prepare a log message for the wire

    Args:
        message (Any): Message to send; non strings are converted with str()
        max_length (int): Maximum length including the truncation marker

    Returns:
        str: Cleaned message, never None

    Examples:
        >>> sanitize_message("disk\\x00 full")
        "disk full"
        >>> sanitize_message(42)
        "42"
    """
    max_length = max_length or config.MAX_MESSAGE_LENGTH

    if message is None:
        text = ""
    elif isinstance(message, bytes):
        text = message.decode('utf-8', errors='replace')
    else:
        text = str(message)

    text = _CONTROL_CHARS.sub('', text)

    if len(text) > max_length:
        keep = max(max_length - len(TRUNCATION_MARKER), 0)
        text = text[:keep] + TRUNCATION_MARKER

    return text


def validate_channel_name(name: Any) -> bool:
    """
    Check that a channel name is a dot separated identifier

    Args:
        name (Any): Candidate channel name

    Returns:
        bool: True if the name can be used as a channel

    Examples:
        >>> validate_channel_name("sqooss.database")
        True
        >>> validate_channel_name("sqooss..database")
        False
    """
    if not isinstance(name, str):
        return False
    return bool(_CHANNEL_NAME.match(name))


def parse_json_safely(json_string: Union[str, bytes], default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling

    Args:
        json_string (str): JSON string to parse
        default (Any): Default value to return on error

    Returns:
        Any: Parsed JSON data or default value
    """
    try:
        if not json_string or not isinstance(json_string, (str, bytes)):
            return default

        return json.loads(json_string)

    except (json.JSONDecodeError, ValueError) as e:
        logger.debug(f"JSON parsing failed: {e}")
        return default


def format_datetime(dt: Union[datetime, date, str, None] = None) -> Optional[str]:
    """
    Format a timestamp as ISO 8601 UTC with millisecond precision

    Args:
        dt (Union[datetime, date, str]): Timestamp to format, now when omitted

    Returns:
        str: Formatted timestamp, None if the input cannot be parsed
    """
    try:
        if dt is None:
            dt = datetime.now(timezone.utc)
        elif isinstance(dt, str):
            dt = datetime.fromisoformat(dt.replace('Z', '+00:00'))
        elif isinstance(dt, date) and not isinstance(dt, datetime):
            dt = datetime.combine(dt, datetime.min.time())

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)

        return dt.astimezone(timezone.utc).isoformat(timespec='milliseconds')

    except (ValueError, TypeError) as e:
        logger.warning(f"Datetime formatting error: {e}")
        return None


def get_source_identifier() -> str:
    """Return "host:pid" for the current process"""
    return f"{socket.gethostname()}:{os.getpid()}"
