"""Recurring schedule used to drive the alert monitor."""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from coinwatch.exceptions import SchedulerError

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Runs a callback repeatedly at a fixed interval."""

    @abstractmethod
    def start(self, callback: Callable[[], object]) -> None:
        """Begin invoking ``callback`` every interval.

        Calling ``start`` on a running scheduler is a no-op.

        Raises:
            SchedulerError: If the timer could not be established.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Prevent future invocations. Safe to call when not running."""
        pass

    @property
    @abstractmethod
    def running(self) -> bool:
        pass


class IntervalScheduler(Scheduler):
    """Fixed-interval scheduler running on one background worker thread.

    Runs never overlap. When a run takes longer than the interval, the
    runs that fell due meanwhile are skipped rather than queued, and the
    next run is aligned to the following interval boundary.
    """

    def __init__(
        self,
        interval_seconds: float,
        run_immediately: bool = False,
        name: str = "coinwatch-scheduler",
    ):
        """Initialize the scheduler.

        Args:
            interval_seconds: Seconds between the start of consecutive runs.
            run_immediately: Run once right after ``start`` instead of
                waiting one interval first.
            name: Worker thread name.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = float(interval_seconds)
        self.run_immediately = run_immediately
        self.name = name
        self.skipped_runs = 0
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def start(self, callback: Callable[[], object]) -> None:
        with self._lock:
            if self.running:
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(callback, stop_event),
                name=self.name,
                daemon=True,
            )
            try:
                thread.start()
            except RuntimeError as e:
                raise SchedulerError(f"Could not start scheduler thread: {e}") from e
            self._stop_event = stop_event
            self._thread = thread

    def stop(self) -> None:
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread of the last ``start`` to exit.

        After ``stop`` this returns once an in-flight run has finished.
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def _run(self, callback: Callable[[], object], stop_event: threading.Event) -> None:
        next_run = time.monotonic()
        if not self.run_immediately:
            next_run += self.interval_seconds

        while not stop_event.wait(max(0.0, next_run - time.monotonic())):
            try:
                callback()
            except Exception:
                logger.exception("Scheduled run failed")

            next_run += self.interval_seconds
            now = time.monotonic()
            if next_run <= now:
                missed = int((now - next_run) // self.interval_seconds) + 1
                self.skipped_runs += missed
                logger.warning(
                    f"Run overran the {self.interval_seconds:g}s interval; "
                    f"skipping {missed} scheduled run(s)"
                )
                next_run += missed * self.interval_seconds
