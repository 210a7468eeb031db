"""
Remote Logger Client
====================

Handle on the remote logging service. Every call is sent as one HTTP request:

    POST {endpoint}/log          one record
    POST {endpoint}/log/batch    {"records": [...]} when flushing the buffer
    GET  {endpoint}/health       liveness check

The endpoint is either configured directly (LOGGER_ENDPOINT_URL) or obtained
from the naming service by object name. Transient failures are retried with
backoff; what happens after the last attempt is decided by the delivery policy.

Author: Alitheia Core Team
"""

import logging
import threading
from typing import Dict, Optional, Union

import requests

from .delivery import DeliveryPolicy, PendingBuffer
from .log_models import DeliveryResult, LogLevel, LogRecord, ObjectReference
from .resolver import ObjectResolver
from ..utils import (
    ErrorHandler,
    RetryConfig,
    RemoteLoggingError,
    DeliveryError,
    measure_time,
    sanitize_message,
    validate_channel_name,
    get_source_identifier,
)
from ..utils.performance_monitor import get_performance_report

# Import configuration
from ..config import config


# Local loggers used by the "local" policy live under this prefix
FALLBACK_LOGGER_PREFIX = "alitheia.remote"


class RemoteLoggerClient:
    """
    Sends log records to the remote logger object
    Safe to share between threads and between any number of facades
    """

    def __init__(self, endpoint: Union[str, ObjectReference, None] = None,
                 resolver: ObjectResolver = None, object_name: str = None,
                 session: requests.Session = None, timeout: float = None,
                 retry_config: RetryConfig = None,
                 policy: Union[DeliveryPolicy, str, None] = None,
                 buffer_size: int = None, max_message_length: int = None):
        """
        Initialize the client

        Args:
            endpoint (str | ObjectReference): Fixed endpoint; resolved by name when omitted
            resolver (ObjectResolver): Resolver used when no endpoint is given
            object_name (str): Name of the remote logger object (default from config)
            session (requests.Session): HTTP session to use
            timeout (float): Request timeout in seconds (default from config)
            retry_config (RetryConfig): Retry behaviour (default from config)
            policy (DeliveryPolicy | str): Failure policy (default from config)
            buffer_size (int): Capacity of the pending buffer (default from config)
            max_message_length (int): Longer messages are truncated (default from config)
        """
        self.logger = logging.getLogger(__name__)
        self.error_handler = ErrorHandler()

        self.object_name = object_name or config.LOGGER_OBJECT_NAME
        self.timeout = timeout or config.REMOTE_TIMEOUT
        self.retry_config = retry_config or RetryConfig.from_config()
        self.policy = DeliveryPolicy.from_value(policy or config.DELIVERY_POLICY)
        self.max_message_length = max_message_length or config.MAX_MESSAGE_LENGTH
        self.buffer = PendingBuffer(buffer_size)
        self.source = get_source_identifier()

        if isinstance(endpoint, str):
            endpoint = ObjectReference(name=self.object_name, url=endpoint.rstrip('/'))
        self._reference: Optional[ObjectReference] = endpoint
        self._fixed_endpoint = endpoint is not None

        self._resolver = resolver
        self._owns_resolver = False
        if not self._fixed_endpoint and self._resolver is None:
            self._resolver = ObjectResolver(session=session)
            self._owns_resolver = True

        self._session = session or requests.Session()
        self._owns_session = session is None

        self._ref_lock = threading.Lock()
        self._flush_lock = threading.RLock()
        self._stats_lock = threading.Lock()
        self._stats = {
            "sent": 0,
            "failed": 0,
            "buffered": 0,
            "fallback": 0,
            "dropped": 0,
        }
        self._closed = False

        self.logger.debug(
            f"Remote logger client initialized (object={self.object_name}, policy={self.policy.value})"
        )

    # =========================================================================
    # Remote interface
    # =========================================================================

    def debug(self, name: str, message) -> DeliveryResult:
        return self.log(name, LogLevel.DEBUG, message)

    def info(self, name: str, message) -> DeliveryResult:
        return self.log(name, LogLevel.INFO, message)

    def warn(self, name: str, message) -> DeliveryResult:
        return self.log(name, LogLevel.WARN, message)

    def error(self, name: str, message) -> DeliveryResult:
        return self.log(name, LogLevel.ERROR, message)

    def log(self, name: str, level: Union[LogLevel, str], message) -> DeliveryResult:
        """
        Send one message to a channel of the remote logger

        Args:
            name (str): Channel name
            level (LogLevel | str): Severity
            message: Message text; converted with str() if needed

        Returns:
            DeliveryResult: What happened to the record

        Raises:
            ValueError: If the channel name or level is invalid
            DeliveryError: If delivery failed and the policy is "raise"
        """
        if not validate_channel_name(name):
            raise ValueError(f"Invalid channel name: {name!r}")

        record = LogRecord(
            logger=name,
            level=self._coerce_level(level),
            message=sanitize_message(message, self.max_message_length),
            source=self.source
        )
        return self.deliver(record)

    def deliver(self, record: LogRecord) -> DeliveryResult:
        """Send a prepared record, applying the delivery policy on failure"""
        if self.policy is DeliveryPolicy.BUFFER:
            # One sender at a time, so an in-flight batch is never overtaken
            with self._flush_lock:
                return self._deliver(record)
        return self._deliver(record)

    def _deliver(self, record: LogRecord) -> DeliveryResult:
        if self._closed:
            # Nothing flushes a closed client's buffer
            policy = DeliveryPolicy.LOCAL if self.policy is DeliveryPolicy.BUFFER else self.policy
            return self._handle_failure(record, DeliveryError("Remote logger client is closed"), 0, policy)

        # Buffered records go out before anything newer
        if self.policy is DeliveryPolicy.BUFFER and len(self.buffer) > 0:
            self.flush()
            if len(self.buffer) > 0:
                return self._handle_failure(
                    record, DeliveryError("Remote logger unavailable, earlier records still pending"), 0
                )

        attempts = 0

        def send_record():
            nonlocal attempts
            attempts += 1
            self._post("log", record.to_payload())

        try:
            self.error_handler.retry_on_error(send_record, retry_config=self.retry_config)
        except RemoteLoggingError as e:
            return self._handle_failure(record, e, attempts)

        self._count("sent")
        return DeliveryResult(delivered=True, outcome="sent", attempts=attempts)

    def flush(self) -> int:
        """
        Send every buffered record in one batch

        Returns:
            int: Number of records delivered; 0 if the batch failed and was requeued
        """
        with self._flush_lock:
            records = self.buffer.drain()
            if not records:
                return 0

            payload = {"records": [record.to_payload() for record in records]}
            try:
                self.error_handler.retry_on_error(
                    self._post, "log/batch", payload, retry_config=self.retry_config
                )
            except RemoteLoggingError as e:
                self.buffer.requeue(records)
                self.logger.warning(f"Flush of {len(records)} buffered records failed: {e}")
                return 0

            self._count("sent", len(records))
            self.logger.info(f"Flushed {len(records)} buffered records")
            return len(records)

    def ping(self) -> bool:
        """Check the remote logger answers its health endpoint; never raises"""
        try:
            reference = self._get_reference()
            response = self._session.get(reference.endpoint("health"), timeout=self.timeout)
            return 200 <= response.status_code < 300
        except (RemoteLoggingError, requests.exceptions.RequestException) as e:
            self.logger.debug(f"Ping failed: {e}")
            return False

    @property
    def reference(self) -> Optional[ObjectReference]:
        """Currently held reference to the remote logger, if resolved"""
        return self._reference

    @property
    def closed(self) -> bool:
        return self._closed

    def get_delivery_stats(self) -> Dict:
        """Delivery counters, buffer state, remote call timings, latency alerts and error counts"""
        with self._stats_lock:
            stats = dict(self._stats)
        stats["pending"] = len(self.buffer)
        stats["overflowed"] = self.buffer.overflowed

        report = get_performance_report(category="remote_logger")
        stats["timings"] = report["timings"]
        stats["slowest_calls"] = report["slowest_functions"]
        stats["alerts"] = report["performance_alerts"]
        stats["errors"] = self.error_handler.get_error_statistics()
        return stats

    def close(self) -> None:
        """
        Flush buffered records (best effort) and release HTTP resources
        Records that still cannot be delivered are written to the local fallback logger
        """
        with self._flush_lock:
            if self._closed:
                return

            if len(self.buffer) > 0:
                self.flush()

            undelivered = self.buffer.drain()
            if undelivered:
                self.logger.warning(f"Closing with {len(undelivered)} undelivered records, writing them locally")
                for record in undelivered:
                    self._write_local(record)
                self._count("fallback", len(undelivered))

            self._closed = True

        if self._owns_session:
            self._session.close()
        if self._owns_resolver:
            self._resolver.close()

        self.logger.debug("Remote logger client closed")

    def __enter__(self) -> "RemoteLoggerClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # =========================================================================
    # Internals
    # =========================================================================

    @measure_time(category="remote_logger")
    def _post(self, path: str, payload: Dict) -> requests.Response:
        """POST a JSON payload to an operation of the remote logger"""
        reference = self._get_reference()
        url = reference.endpoint(path)

        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self._invalidate_reference()
            raise DeliveryError(f"Remote logger unreachable at {url}", e)

        if not 200 <= response.status_code < 300:
            if response.status_code == 404:
                self._invalidate_reference()
            raise DeliveryError(
                f"Remote logger returned HTTP {response.status_code}",
                status_code=response.status_code
            )

        return response

    def _get_reference(self) -> ObjectReference:
        """Return the held reference, resolving it by name if needed"""
        with self._ref_lock:
            if self._reference is None:
                self._reference = self._resolver.resolve(self.object_name)
            return self._reference

    def _invalidate_reference(self) -> None:
        """Drop a resolved reference so the next attempt looks it up again"""
        if self._fixed_endpoint:
            return
        with self._ref_lock:
            self._reference = None
        self._resolver.invalidate(self.object_name)

    def _handle_failure(self, record: LogRecord, error: RemoteLoggingError,
                        attempts: int, policy: DeliveryPolicy = None) -> DeliveryResult:
        """Apply the delivery policy (the client's own unless given) to a record that could not be sent"""
        policy = policy or self.policy

        if policy is DeliveryPolicy.RAISE:
            self._count("failed")
            if isinstance(error, DeliveryError):
                error.attempts = attempts
                raise error
            raise DeliveryError(f"Could not deliver record to {record.logger}", error, attempts=attempts)

        if policy is DeliveryPolicy.DROP:
            self._count("dropped")
            outcome = "dropped"
        elif policy is DeliveryPolicy.BUFFER:
            self.buffer.append(record)
            self._count("buffered")
            outcome = "buffered"
        else:
            self._write_local(record)
            self._count("fallback")
            outcome = "fallback"

        return DeliveryResult(delivered=False, outcome=outcome, attempts=attempts, error=str(error))

    def _write_local(self, record: LogRecord) -> None:
        """Write a record to the local logging system"""
        local_logger = logging.getLogger(f"{FALLBACK_LOGGER_PREFIX}.{record.logger}")
        local_logger.log(record.level.stdlib_level, record.message)

    def _count(self, key: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._stats[key] += amount

    @staticmethod
    def _coerce_level(level: Union[LogLevel, str]) -> LogLevel:
        if isinstance(level, LogLevel):
            return level
        value = str(level).lower()
        if value == "warning":
            return LogLevel.WARN
        try:
            return LogLevel(value)
        except ValueError:
            raise ValueError(f"Unknown log level: {level!r}") from None


# =============================================================================
# PROCESS-WIDE DEFAULT CLIENT
# =============================================================================

_default_client: Optional[RemoteLoggerClient] = None
_default_lock = threading.Lock()


def get_remote_logger() -> RemoteLoggerClient:
    """
    Return the shared client used by facades created without an explicit remote

    Built on first use from LOGGER_ENDPOINT_URL, or from a naming service
    lookup of LOGGER_OBJECT_NAME when no endpoint is configured.
    """
    global _default_client
    with _default_lock:
        if _default_client is None or _default_client.closed:
            _default_client = RemoteLoggerClient(endpoint=config.LOGGER_ENDPOINT_URL)
        return _default_client


def set_remote_logger(client: Optional[RemoteLoggerClient]) -> None:
    """Install a client as the shared default (None forgets the current one)"""
    global _default_client
    with _default_lock:
        _default_client = client


def reset_remote_logger() -> None:
    """Close and forget the shared client"""
    global _default_client
    with _default_lock:
        client, _default_client = _default_client, None
    if client is not None:
        client.close()
