"""
Error Handler Utility
====================

Provides centralized error handling for the remote logging client.
Handles transport error classification, retry logic, and structured error reporting.

Key Features:
- Classification of transport failures (timeouts, refused connections, HTTP status codes)
- Automatic retry logic with exponential backoff for transient failures
- Structured error logging with context information
- Error statistics and monitoring

Classes:
    ErrorHandler: Main error handling interface
    ErrorCategory: Enumeration of error categories
    ErrorContext: Context information for errors
    RetryConfig: Configuration for retry behavior
    RemoteLoggingError: Base exception raised by the package
    EndpointResolutionError: Remote object could not be located
    DeliveryError: A log record could not be delivered

Author: Alitheia Core Team
"""

import logging
import random
import threading
import time
import traceback
from typing import Any, Optional, Dict, Callable, List
from dataclasses import dataclass
from enum import Enum
from datetime import datetime

import requests

# Import configuration
from ..config import config


class RemoteLoggingError(Exception):
    """Base class for errors raised by the remote logging client"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} (cause: {self.cause})"


class EndpointResolutionError(RemoteLoggingError):
    """The naming service could not provide a reference for an object name"""


class DeliveryError(RemoteLoggingError):
    """A log record could not be handed to the remote logger"""

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 status_code: Optional[int] = None, attempts: int = 0):
        super().__init__(message, cause)
        self.status_code = status_code
        self.attempts = attempts


class ErrorCategory(Enum):
    """
    Error categories for classification
    """
    # Lookup errors
    NAMING_LOOKUP_FAILED = "naming_lookup_failed"
    ENDPOINT_NOT_FOUND = "endpoint_not_found"

    # Transport errors
    API_CONNECTION = "api_connection"
    API_TIMEOUT = "api_timeout"
    API_RATE_LIMIT = "api_rate_limit"
    API_AUTHENTICATION = "api_authentication"
    API_REJECTED = "api_rejected"
    API_SERVER_ERROR = "api_server_error"
    NETWORK_ERROR = "network_error"
    RESPONSE_INVALID = "response_invalid"

    # Local errors
    MESSAGE_INVALID = "message_invalid"
    CONFIG_INVALID = "config_invalid"

    # Unknown errors
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """
    Error severity levels
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Context information for errors

    Attributes:
        module (str): Module where error occurred
        function (str): Function where error occurred
        system_state (Dict): Relevant system state (endpoint, channel, status)
        timestamp (datetime): When error occurred
    """
    module: str
    function: str
    system_state: Optional[Dict] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior

    Attributes:
        max_attempts (int): Maximum number of attempts, the first one included
        base_delay (float): Base delay between retries in seconds
        max_delay (float): Maximum delay between retries
        exponential_backoff (bool): Whether to use exponential backoff
        jitter (bool): Whether to add random jitter to delays
        retryable_errors (List[ErrorCategory]): Error categories that should trigger retry
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 10.0
    exponential_backoff: bool = True
    jitter: bool = True
    retryable_errors: List[ErrorCategory] = None

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.retryable_errors is None:
            self.retryable_errors = [
                ErrorCategory.API_CONNECTION,
                ErrorCategory.API_TIMEOUT,
                ErrorCategory.API_RATE_LIMIT,
                ErrorCategory.API_SERVER_ERROR,
                ErrorCategory.NETWORK_ERROR
            ]

    @classmethod
    def from_config(cls) -> "RetryConfig":
        """Build the retry configuration from application settings"""
        return cls(
            max_attempts=config.RETRY_COUNT,
            base_delay=config.RETRY_BASE_DELAY,
            max_delay=config.RETRY_MAX_DELAY
        )


@dataclass
class ErrorReport:
    """
    Structured error report

    Attributes:
        category (ErrorCategory): Error category
        severity (ErrorSeverity): Error severity
        message (str): Human-readable error message
        technical_details (str): Technical error details
        context (ErrorContext): Error context information
        stack_trace (str): Stack trace if available
        recovery_suggestions (List[str]): Suggested recovery actions
        occurred_at (datetime): When error occurred
    """
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    technical_details: str
    context: ErrorContext
    stack_trace: Optional[str] = None
    recovery_suggestions: Optional[List[str]] = None
    occurred_at: Optional[datetime] = None

    def __post_init__(self):
        if self.occurred_at is None:
            self.occurred_at = datetime.now()
        if self.recovery_suggestions is None:
            self.recovery_suggestions = []


def category_for_status(status_code: Optional[int]) -> ErrorCategory:
    """Map an HTTP status code returned by a remote object to an error category"""
    if status_code is None:
        return ErrorCategory.API_CONNECTION
    if status_code in (401, 403):
        return ErrorCategory.API_AUTHENTICATION
    if status_code == 404:
        return ErrorCategory.ENDPOINT_NOT_FOUND
    if status_code == 408:
        return ErrorCategory.API_TIMEOUT
    if status_code == 429:
        return ErrorCategory.API_RATE_LIMIT
    if 500 <= status_code < 600:
        return ErrorCategory.API_SERVER_ERROR
    if 400 <= status_code < 500:
        return ErrorCategory.API_REJECTED
    return ErrorCategory.API_CONNECTION


class ErrorHandler:
    """
    Main error handling interface
    Provides centralized error management with logging, retry logic, and reporting
    """

    def __init__(self):
        """Initialize Error Handler"""
        self.logger = logging.getLogger(__name__)

        # Error statistics, shared by every thread using the owning client
        self._error_counts = {}
        self._total_errors = 0
        self._stats_lock = threading.Lock()

        # Default retry configuration
        self.default_retry_config = RetryConfig.from_config()

        self.logger.debug("Error Handler initialized")

    def handle_error(self, message: str, exception: Exception = None,
                    category: ErrorCategory = ErrorCategory.UNKNOWN,
                    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                    context: ErrorContext = None,
                    raise_exception: bool = False) -> ErrorReport:
        """
        Handle an error with logging and reporting

        Args:
            message (str): Human-readable error message
            exception (Exception): Original exception if available
            category (ErrorCategory): Error category
            severity (ErrorSeverity): Error severity
            context (ErrorContext): Error context
            raise_exception (bool): Whether to re-raise the exception

        Returns:
            ErrorReport: Structured error report
        """
        # Update statistics
        with self._stats_lock:
            self._total_errors += 1
            self._error_counts[category] = self._error_counts.get(category, 0) + 1

        # Get technical details and stack trace
        technical_details = str(exception) if exception else "No exception details"
        stack_trace = None
        if exception is not None:
            stack_trace = "".join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))

        error_report = ErrorReport(
            category=category,
            severity=severity,
            message=message,
            technical_details=technical_details,
            context=context or ErrorContext(module="unknown", function="unknown"),
            stack_trace=stack_trace,
            recovery_suggestions=self._get_recovery_suggestions(category)
        )

        self._log_error(error_report)

        if raise_exception and exception:
            raise exception

        return error_report

    def handle_api_error(self, object_name: str, endpoint: str, status_code: int = None,
                        response_text: str = None, exception: Exception = None) -> ErrorReport:
        """
        Handle errors returned by a remote object

        Args:
            object_name (str): Name of the remote object (e.g. "Logger")
            endpoint (str): URL that was called
            status_code (int): HTTP status code
            response_text (str): Response text
            exception (Exception): Original exception

        Returns:
            ErrorReport: Structured error report
        """
        category = category_for_status(status_code)

        context = ErrorContext(
            module="remote_client",
            function=f"{object_name}_request",
            system_state={
                "object_name": object_name,
                "endpoint": endpoint,
                "status_code": status_code,
                "response_text": response_text[:500] if response_text else None
            }
        )

        message = f"{object_name} remote call failed"
        if status_code:
            message += f" (HTTP {status_code})"

        return self.handle_error(
            message=message,
            exception=exception,
            category=category,
            severity=ErrorSeverity.HIGH if status_code and status_code >= 500 else ErrorSeverity.MEDIUM,
            context=context
        )

    def retry_on_error(self, func: Callable, *args,
                      retry_config: RetryConfig = None, **kwargs) -> Any:
        """
        Execute function with retry logic

        Args:
            func (Callable): Function to execute
            *args: Function arguments
            retry_config (RetryConfig): Retry configuration
            **kwargs: Function keyword arguments

        Returns:
            Any: Function result

        Raises:
            Exception: The last exception if all retry attempts fail
        """
        config = retry_config or self.default_retry_config
        last_exception = None
        func_name = getattr(func, "__name__", repr(func))

        for attempt in range(config.max_attempts):
            try:
                result = func(*args, **kwargs)

                if attempt > 0:
                    self.logger.info(f"Function {func_name} succeeded on attempt {attempt + 1}")

                return result

            except Exception as e:
                last_exception = e

                error_category = self.categorize_exception(e)
                if error_category not in config.retryable_errors:
                    self.logger.warning(f"Error {error_category.value} not retryable, failing immediately")
                    break

                if attempt == config.max_attempts - 1:
                    break

                delay = self._calculate_retry_delay(attempt, config)

                self.logger.warning(
                    f"Function {func_name} failed on attempt {attempt + 1}, "
                    f"retrying in {delay:.1f}s: {str(e)}"
                )

                time.sleep(delay)

        self.handle_error(
            message=f"Function {func_name} failed after {config.max_attempts} attempts",
            exception=last_exception,
            category=self.categorize_exception(last_exception),
            severity=ErrorSeverity.HIGH
        )

        raise last_exception

    def categorize_exception(self, exception: Exception) -> ErrorCategory:
        """Categorize exception into error category"""
        if isinstance(exception, DeliveryError):
            if exception.status_code is not None:
                return category_for_status(exception.status_code)
            if exception.cause is not None:
                return self.categorize_exception(exception.cause)
            return ErrorCategory.API_CONNECTION
        elif isinstance(exception, EndpointResolutionError):
            return ErrorCategory.NAMING_LOOKUP_FAILED
        elif isinstance(exception, requests.exceptions.HTTPError):
            response = exception.response
            return category_for_status(response.status_code if response is not None else None)
        # ConnectTimeout is both a Timeout and a ConnectionError
        elif isinstance(exception, (requests.exceptions.Timeout, TimeoutError)):
            return ErrorCategory.API_TIMEOUT
        elif isinstance(exception, (requests.exceptions.ConnectionError, ConnectionError)):
            return ErrorCategory.NETWORK_ERROR
        elif isinstance(exception, requests.exceptions.RequestException):
            return ErrorCategory.API_CONNECTION
        elif isinstance(exception, ValueError):
            return ErrorCategory.RESPONSE_INVALID
        else:
            return ErrorCategory.UNKNOWN

    def _log_error(self, error_report: ErrorReport) -> None:
        """Log error report"""
        log_message = (
            f"[{error_report.category.value}] {error_report.message}\n"
            f"Severity: {error_report.severity.value}\n"
            f"Technical: {error_report.technical_details}\n"
            f"Module: {error_report.context.module}.{error_report.context.function}"
        )

        if error_report.context.system_state:
            log_message += f"\nState: {error_report.context.system_state}"

        if error_report.recovery_suggestions:
            log_message += f"\nSuggestions: {', '.join(error_report.recovery_suggestions)}"

        if error_report.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(log_message)
        elif error_report.severity == ErrorSeverity.HIGH:
            self.logger.error(log_message)
        elif error_report.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)

        if (error_report.severity in [ErrorSeverity.HIGH, ErrorSeverity.CRITICAL]
            and error_report.stack_trace):
            self.logger.debug(f"Stack trace:\n{error_report.stack_trace}")

    def _calculate_retry_delay(self, attempt: int, config: RetryConfig) -> float:
        """Calculate delay before next retry attempt"""
        if config.exponential_backoff:
            delay = config.base_delay * (2 ** attempt)
        else:
            delay = config.base_delay

        delay = min(delay, config.max_delay)

        if config.jitter:
            delay *= (0.5 + random.random() * 0.5)  # 50-100% of calculated delay

        return delay

    def _get_recovery_suggestions(self, category: ErrorCategory) -> List[str]:
        """Get recovery suggestions for error category"""
        suggestions = {
            ErrorCategory.NAMING_LOOKUP_FAILED: [
                "Check NAMING_SERVICE_URL",
                "Verify the naming service is running",
                "Set LOGGER_ENDPOINT_URL to bypass the lookup"
            ],
            ErrorCategory.ENDPOINT_NOT_FOUND: [
                "Check LOGGER_OBJECT_NAME is registered with the naming service",
                "Verify the remote logger endpoint URL"
            ],
            ErrorCategory.API_CONNECTION: [
                "Check network connectivity to the remote logger",
                "Try again in a few minutes"
            ],
            ErrorCategory.API_TIMEOUT: [
                "Increase REMOTE_TIMEOUT",
                "Check network latency"
            ],
            ErrorCategory.API_RATE_LIMIT: [
                "Reduce logging volume",
                "Use the buffer delivery policy"
            ],
            ErrorCategory.API_AUTHENTICATION: [
                "Check the remote logger access permissions"
            ],
            ErrorCategory.API_SERVER_ERROR: [
                "Check the remote logger service health"
            ],
            ErrorCategory.NETWORK_ERROR: [
                "Check the remote logger host is reachable"
            ],
        }

        return suggestions.get(category, ["Review error details"])

    def get_error_statistics(self) -> Dict:
        """Get error statistics"""
        with self._stats_lock:
            counts = dict(self._error_counts)
            total = self._total_errors

        return {
            "total_errors": total,
            "errors_by_category": {category.value: count for category, count in counts.items()},
            "most_common_error": max(counts, key=counts.get).value if counts else None
        }

