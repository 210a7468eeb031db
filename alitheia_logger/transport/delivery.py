"""
Delivery Policy and Pending Buffer
==================================

What the client does with a record the remote logger could not accept,
and the bounded queue used by the buffering policy.

Author: Alitheia Core Team
"""

import logging
import threading
from collections import deque
from enum import Enum
from typing import List

from .log_models import LogRecord

# Import configuration
from ..config import config


class DeliveryPolicy(Enum):
    """
    Failure policies for undeliverable records

    RAISE: propagate a DeliveryError to the caller
    DROP: discard the record
    LOCAL: write the record to a local standard library logger
    BUFFER: keep the record and retry it before the next successful send
    """
    RAISE = "raise"
    DROP = "drop"
    LOCAL = "local"
    BUFFER = "buffer"

    @classmethod
    def from_value(cls, value) -> "DeliveryPolicy":
        """Accept a DeliveryPolicy or its (case insensitive) name"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown delivery policy {value!r}, expected one of "
                f"{[policy.value for policy in cls]}"
            ) from None


class PendingBuffer:
    """
    Bounded FIFO of records waiting for the remote logger
    When full, the oldest record is dropped and counted as overflowed
    """

    def __init__(self, max_size: int = None):
        self.logger = logging.getLogger(__name__)
        self.max_size = max_size or config.BUFFER_MAX_SIZE
        self._records: deque = deque()
        self._lock = threading.Lock()
        self.overflowed = 0

    def append(self, record: LogRecord) -> bool:
        """
        Queue a record

        Returns:
            bool: False if an older record had to be dropped to make room
        """
        with self._lock:
            dropped = False
            if len(self._records) >= self.max_size:
                self._records.popleft()
                self.overflowed += 1
                dropped = True
            self._records.append(record)

        if dropped:
            self.logger.warning(f"Pending buffer full ({self.max_size}), dropped oldest record")
        return not dropped

    def drain(self) -> List[LogRecord]:
        """Remove and return every queued record, oldest first"""
        with self._lock:
            records = list(self._records)
            self._records.clear()
            return records

    def requeue(self, records: List[LogRecord]) -> None:
        """
        Put records taken by drain() back in front of newer ones

        Records beyond capacity are dropped from the old end.
        """
        with self._lock:
            merged = list(records) + list(self._records)
            overflow = max(len(merged) - self.max_size, 0)
            if overflow:
                self.overflowed += overflow
                merged = merged[overflow:]
            self._records = deque(merged)

        if overflow:
            self.logger.warning(f"Pending buffer full ({self.max_size}), dropped {overflow} records")

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
