"""Alert monitoring engine and its scheduler."""

from coinwatch.monitor.engine import DEFAULT_INTERVAL_SECONDS, AlertMonitor, TickReport
from coinwatch.monitor.scheduler import IntervalScheduler, Scheduler

__all__ = [
    "AlertMonitor",
    "DEFAULT_INTERVAL_SECONDS",
    "IntervalScheduler",
    "Scheduler",
    "TickReport",
]
