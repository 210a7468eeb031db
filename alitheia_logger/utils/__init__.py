"""
Utilities Module
===============

Common helpers used by the remote logging client:
- Caching of resolved remote object references
- Error classification, retry and reporting
- Timing of remote calls
- Message and channel name processing

Classes:
    CacheManager: In-memory TTL cache with LRU eviction
    ErrorHandler: Standardized error handling and retry
    PerformanceMonitor: Tracks remote call latency

Functions:
    sanitize_message(): Clean and truncate a log message
    validate_channel_name(): Check a dot separated channel name
    measure_time(): Performance timing decorator
"""

# Version and module info
__version__ = "1.0.0"
__module_name__ = "utils"

from .cache_manager import CacheManager
from .error_handler import (
    ErrorHandler,
    ErrorCategory,
    ErrorSeverity,
    RetryConfig,
    RemoteLoggingError,
    EndpointResolutionError,
    DeliveryError,
)
from .performance_monitor import PerformanceMonitor, measure_time

from .data_utils import (
    sanitize_message,
    validate_channel_name,
    parse_json_safely,
    format_datetime,
    get_source_identifier,
)

__all__ = [
    # Core utility classes
    "CacheManager",
    "ErrorHandler",
    "ErrorCategory",
    "ErrorSeverity",
    "RetryConfig",
    "PerformanceMonitor",

    # Exceptions
    "RemoteLoggingError",
    "EndpointResolutionError",
    "DeliveryError",

    # Functions
    "measure_time",
    "sanitize_message",
    "validate_channel_name",
    "parse_json_safely",
    "format_datetime",
    "get_source_identifier",
]

