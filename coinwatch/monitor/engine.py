"""Alert monitoring engine.

Every tick the monitor reads all active alerts, fetches prices for the
distinct symbols they reference in one batched lookup, and fires each
alert whose condition is met.

Delivery guarantee: at most once per crossing. A fired alert is always
notified first and marked triggered afterwards, and it is marked even if
the notification failed. A lost notification is preferred over a repeated
one. If marking fails, the alert stays active and may notify again on the
next tick.
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from coinwatch.db.base import AlertStore
from coinwatch.exceptions import PriceFeedUnavailable, StoreError
from coinwatch.feeds.base import PriceFeed, normalize_symbols
from coinwatch.models import Alert, PriceSnapshot
from coinwatch.monitor.scheduler import IntervalScheduler, Scheduler
from coinwatch.notifiers.base import Notifier

logger = logging.getLogger(__name__)


DEFAULT_INTERVAL_SECONDS = 120


class TickReport(BaseModel):
    """Outcome of one evaluation pass."""

    started_at: datetime = Field(default_factory=datetime.now)
    skipped: bool = Field(default=False, description="Another tick was still running")
    alerts_checked: int = 0
    symbols_requested: int = 0
    prices_resolved: int = 0
    triggered: list[str] = Field(default_factory=list, description="IDs of fired alerts")
    notification_failures: int = 0
    store_failures: int = 0
    stale_notifications: int = Field(
        default=0, description="Alerts notified but removed or triggered elsewhere mid-tick"
    )
    feed_unavailable: bool = False

    def summary(self) -> str:
        if self.skipped:
            return "tick skipped: previous tick still running"
        return (
            f"{self.alerts_checked} active alert(s), "
            f"{self.prices_resolved}/{self.symbols_requested} symbol(s) priced, "
            f"{len(self.triggered)} triggered"
        )


class AlertMonitor:
    """Periodically evaluates active alerts against live prices.

    The monitor keeps no alert state of its own; everything it reads and
    writes goes through the injected store. Ticks never overlap: a tick
    requested while another is running returns a skipped report.
    """

    def __init__(
        self,
        store: AlertStore,
        feed: PriceFeed,
        notifier: Notifier,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        scheduler: Optional[Scheduler] = None,
    ):
        """Initialize the monitor.

        Args:
            store: Alert store shared with the command layer.
            feed: Source of price snapshots.
            notifier: Channel used to deliver fired alerts.
            interval_seconds: Seconds between ticks when no scheduler is given.
            scheduler: Optional custom scheduler.
        """
        self.store = store
        self.feed = feed
        self.notifier = notifier
        self.scheduler = scheduler or IntervalScheduler(interval_seconds)
        self._tick_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        """Start the recurring schedule.

        Raises:
            SchedulerError: If the schedule could not be established.
        """
        if self.scheduler.running:
            return
        self.scheduler.start(self.evaluate)
        logger.info("Alert monitoring started")

    def stop(self) -> None:
        """Stop scheduling ticks. An in-flight tick runs to completion."""
        if not self.scheduler.running:
            return
        self.scheduler.stop()
        logger.info("Alert monitoring stopped")

    def evaluate(self) -> TickReport:
        """Run one evaluation pass.

        Never raises for feed, store or notifier failures; they are logged
        and reflected in the returned report.
        """
        report = TickReport()
        if not self._tick_lock.acquire(blocking=False):
            report.skipped = True
            logger.warning("Skipping tick: previous tick still running")
            return report
        try:
            self._evaluate(report)
        finally:
            self._tick_lock.release()
        return report

    def _evaluate(self, report: TickReport) -> None:
        try:
            alerts = self.store.list_active()
        except Exception:
            logger.exception("Could not read active alerts")
            report.store_failures += 1
            return

        if not alerts:
            return
        report.alerts_checked = len(alerts)

        symbols = normalize_symbols(alert.symbol for alert in alerts)
        report.symbols_requested = len(symbols)

        try:
            prices = self.feed.get_prices(symbols)
        except PriceFeedUnavailable as e:
            report.feed_unavailable = True
            logger.warning(f"Price feed unavailable, no alerts evaluated this tick: {e}")
            return
        except Exception:
            report.feed_unavailable = True
            logger.exception("Price lookup failed, no alerts evaluated this tick")
            return

        prices = {symbol.upper(): snapshot for symbol, snapshot in prices.items()}
        report.prices_resolved = len(prices)

        for alert in alerts:
            snapshot = prices.get(alert.symbol.upper())
            if snapshot is None:
                logger.debug(f"No price for {alert.symbol}; alert {alert.id} deferred")
                continue
            if alert.is_crossed(snapshot.price):
                self._fire(alert, snapshot, report)

        logger.info(f"Alert check complete: {report.summary()}")

    def _fire(self, alert: Alert, snapshot: PriceSnapshot, report: TickReport) -> None:
        symbol = alert.symbol.upper()
        try:
            delivered = self.notifier.notify(
                alert.owner,
                symbol,
                snapshot.price,
                alert.target_price,
                alert.condition,
            )
        except Exception:
            delivered = False
            logger.exception(f"Notifier raised for alert {alert.id}")
        if not delivered:
            report.notification_failures += 1
            logger.warning(
                f"Notification for alert {alert.id} ({alert.describe()}) to "
                f"{alert.owner} was not confirmed; marking triggered anyway"
            )

        try:
            changed = self.store.mark_triggered(alert.id)
        except StoreError as e:
            report.store_failures += 1
            logger.error(f"Alert {alert.id} stays active, could not persist trigger: {e}")
            return
        except Exception:
            report.store_failures += 1
            logger.exception(f"Alert {alert.id} stays active, could not persist trigger")
            return

        if not changed:
            report.stale_notifications += 1
            logger.warning(
                f"Alert {alert.id} ({alert.describe()}) was removed or already "
                f"triggered while this tick ran; its notification was stale"
            )
            return

        report.triggered.append(alert.id)
        logger.info(
            f"Alert triggered for {alert.owner}: {alert.describe()} "
            f"at {snapshot.price:g}"
        )
