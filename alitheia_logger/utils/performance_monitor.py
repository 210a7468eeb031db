"""
Performance Monitoring Utilities
===============================

Timing statistics for remote calls made by the logging client.

Key Features:
- Call timing with a decorator
- Per-operation statistics with a sliding window of recent timings
- Slow call warnings based on a configurable threshold
- Performance reports for diagnostics

Classes:
    PerformanceMonitor: Main performance monitoring interface
    TimingStats: Statistics for call execution times

Functions:
    measure_time: Decorator for measuring function execution time
    get_performance_report: Report for the process-wide monitor

Author: Alitheia Core Team
"""

import time
import logging
import functools
import threading
from typing import Dict, List, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
from collections import deque

# Import configuration
from ..config import config


@dataclass
class TimingStats:
    """
    Statistics for function execution times

    Attributes:
        function_name (str): Name of the function
        call_count (int): Number of times function was called
        total_time (float): Total execution time in seconds
        min_time (float): Minimum execution time
        max_time (float): Maximum execution time
        recent_times (deque): Recent execution times (sliding window)
        last_called (datetime): When function was last called
    """
    function_name: str
    call_count: int = 0
    total_time: float = 0.0
    min_time: float = float('inf')
    max_time: float = 0.0
    recent_times: deque = field(default_factory=lambda: deque(maxlen=100))
    last_called: Optional[datetime] = None

    @property
    def avg_time(self) -> float:
        """Calculate average execution time"""
        return self.total_time / self.call_count if self.call_count > 0 else 0.0

    @property
    def recent_avg_time(self) -> float:
        """Calculate average of recent execution times"""
        return sum(self.recent_times) / len(self.recent_times) if self.recent_times else 0.0

    def add_timing(self, execution_time: float) -> None:
        """Add a new timing measurement"""
        self.call_count += 1
        self.total_time += execution_time
        self.min_time = min(self.min_time, execution_time)
        self.max_time = max(self.max_time, execution_time)
        self.recent_times.append(execution_time)
        self.last_called = datetime.now()

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "function_name": self.function_name,
            "call_count": self.call_count,
            "total_time": round(self.total_time, 4),
            "min_time": round(self.min_time, 4) if self.min_time != float('inf') else 0,
            "max_time": round(self.max_time, 4),
            "avg_time": round(self.avg_time, 4),
            "recent_avg_time": round(self.recent_avg_time, 4),
            "last_called": self.last_called.isoformat() if self.last_called else None
        }


class PerformanceMonitor:
    """
    Main performance monitoring interface
    Collects timing statistics for remote calls
    """

    def __init__(self, slow_call_threshold: float = None):
        """Initialize Performance Monitor"""
        self.logger = logging.getLogger(__name__)

        self._timing_stats: Dict[str, TimingStats] = {}
        self._lock = threading.RLock()

        # Calls slower than this are reported (seconds)
        self.slow_call_threshold = (slow_call_threshold if slow_call_threshold is not None
                                    else config.SLOW_CALL_THRESHOLD)

    def record_timing(self, function_name: str, execution_time: float) -> None:
        """
        Record timing for a function

        Args:
            function_name (str): Name of the function
            execution_time (float): Execution time in seconds
        """
        with self._lock:
            if function_name not in self._timing_stats:
                self._timing_stats[function_name] = TimingStats(function_name)

            self._timing_stats[function_name].add_timing(execution_time)

        if self.slow_call_threshold and execution_time > self.slow_call_threshold:
            self.logger.warning(f"Slow call: {function_name} took {execution_time:.2f}s")

    def get_slowest_functions(self, limit: int = 10, category: str = None) -> List[Dict]:
        """
        Get list of slowest functions by average execution time

        Args:
            limit (int): Maximum number of functions to return
            category (str): Only consider functions recorded under this category

        Returns:
            List[Dict]: Sorted list of function statistics
        """
        with self._lock:
            sorted_stats = sorted(
                self._select(category),
                key=lambda x: x.avg_time,
                reverse=True
            )

            return [stats.to_dict() for stats in sorted_stats[:limit]]

    def generate_performance_report(self, category: str = None) -> Dict:
        """
        Generate performance report

        Args:
            category (str): Only report functions recorded under this category

        Returns:
            Dict: Performance report with timing data and alerts
        """
        with self._lock:
            selected = self._select(category)
            total_calls = sum(stats.call_count for stats in selected)
            total_time = sum(stats.total_time for stats in selected)

            return {
                "report_timestamp": datetime.now().isoformat(),
                "summary": {
                    "total_functions_monitored": len(selected),
                    "total_function_calls": total_calls,
                    "total_execution_time_seconds": round(total_time, 2),
                    "average_call_time": round(total_time / total_calls, 4) if total_calls > 0 else 0
                },
                "timings": {stats.function_name: stats.to_dict() for stats in selected},
                "slowest_functions": self.get_slowest_functions(limit=5, category=category),
                "performance_alerts": self._generate_performance_alerts(selected)
            }

    def _select(self, category: str = None) -> List[TimingStats]:
        """Timing stats whose function name carries the category prefix"""
        prefix = f"{category}." if category else ""
        return [stats for name, stats in self._timing_stats.items() if name.startswith(prefix)]

    def _generate_performance_alerts(self, selected: List[TimingStats]) -> List[Dict]:
        """Generate performance alerts based on thresholds"""
        alerts = []

        for stats in selected:
            if self.slow_call_threshold and stats.avg_time > self.slow_call_threshold:
                alerts.append({
                    "type": "slow_call",
                    "function": stats.function_name,
                    "avg_time": round(stats.avg_time, 2),
                    "call_count": stats.call_count,
                    "message": f"{stats.function_name} averages {stats.avg_time:.2f}s per call"
                })

            if len(stats.recent_times) >= 10:
                recent_avg = stats.recent_avg_time
                if recent_avg > stats.avg_time * 1.5:
                    alerts.append({
                        "type": "performance_degradation",
                        "function": stats.function_name,
                        "recent_avg": round(recent_avg, 2),
                        "overall_avg": round(stats.avg_time, 2),
                        "message": f"{stats.function_name} latency has degraded"
                    })

        return alerts


# Global performance monitor instance
_performance_monitor = PerformanceMonitor()


def measure_time(func: Callable = None, *, category: str = None) -> Callable:
    """
    Decorator to measure function execution time

    Args:
        func (Callable): Function to decorate
        category (str): Optional category for grouping functions

    Returns:
        Callable: Decorated function

    Examples:
        @measure_time
        def slow_function():
            time.sleep(1)

        @measure_time(category="remote_logger")
        def send():
            pass
    """
    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return f(*args, **kwargs)
            finally:
                execution_time = time.perf_counter() - start_time
                function_name = f"{category}.{f.__name__}" if category else f.__name__
                _performance_monitor.record_timing(function_name, execution_time)

        return wrapper

    # Handle both @measure_time and @measure_time() usage
    if func is None:
        return decorator
    else:
        return decorator(func)


def get_performance_report(category: str = None) -> Dict:
    """Generate performance report, optionally limited to one category"""
    return _performance_monitor.generate_performance_report(category=category)
