"""Property-based tests for the alert monitoring engine.

**Feature: coinwatch**
"""

import sqlite3
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from coinwatch.db.memory import MemoryStore
from coinwatch.db.store import DataStore
from coinwatch.exceptions import PriceFeedUnavailable, SchedulerError, StoreError
from coinwatch.feeds.base import PriceFeed
from coinwatch.models import ChatId, PriceSnapshot
from coinwatch.monitor.engine import AlertMonitor, TickReport
from coinwatch.monitor.scheduler import Scheduler
from coinwatch.notifiers.base import Notifier


# ============================================================================
# Test Doubles
# ============================================================================

class FakeFeed(PriceFeed):
    """Feed serving fixed prices and recording every lookup."""

    def __init__(self, prices: Optional[dict] = None, error: Optional[Exception] = None):
        self.prices = {k.upper(): v for k, v in (prices or {}).items()}
        self.error = error
        self.calls: list[list[str]] = []

    def get_prices(self, symbols: Iterable[str]) -> dict[str, PriceSnapshot]:
        symbols = list(symbols)
        self.calls.append(symbols)
        if self.error is not None:
            raise self.error
        return {
            s: PriceSnapshot(symbol=s, price=self.prices[s])
            for s in symbols
            if s in self.prices
        }


class RecordingNotifier(Notifier):
    """Notifier that records deliveries instead of sending them."""

    def __init__(self, result: bool = True, fail_for: Optional[set] = None):
        self.result = result
        self.fail_for = fail_for or set()
        self.sent: list[tuple] = []
        self.messages: list[tuple] = []

    def send_message(self, destination, text) -> bool:
        self.messages.append((destination, text))
        return self.result

    def notify(self, destination, symbol, current_price, target_price, condition) -> bool:
        self.sent.append((destination, symbol, current_price, target_price, condition))
        if symbol in self.fail_for:
            raise RuntimeError(f"delivery to {destination} exploded")
        return super().notify(destination, symbol, current_price, target_price, condition)


class FlakyStore(MemoryStore):
    """Memory store whose writes fail for chosen alert IDs."""

    def __init__(self, fail_ids: Optional[set] = None, fail_listing: bool = False):
        super().__init__()
        self.fail_ids = fail_ids or set()
        self.fail_listing = fail_listing

    def list_active(self):
        if self.fail_listing:
            raise StoreError("database is locked")
        return super().list_active()

    def mark_triggered(self, alert_id: str) -> bool:
        if alert_id in self.fail_ids:
            raise StoreError("disk I/O error")
        return super().mark_triggered(alert_id)


class FakeScheduler(Scheduler):
    """Scheduler that only records start/stop requests."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.callback = None
        self.start_calls = 0
        self.stop_calls = 0
        self._running = False

    def start(self, callback) -> None:
        self.start_calls += 1
        if self.error is not None:
            raise self.error
        self.callback = callback
        self._running = True

    def stop(self) -> None:
        self.stop_calls += 1
        self._running = False

    @property
    def running(self) -> bool:
        return self._running


def make_monitor(store=None, feed=None, notifier=None, scheduler=None) -> AlertMonitor:
    return AlertMonitor(
        store=store if store is not None else MemoryStore(),
        feed=feed if feed is not None else FakeFeed(),
        notifier=notifier if notifier is not None else RecordingNotifier(),
        scheduler=scheduler if scheduler is not None else FakeScheduler(),
    )


# ============================================================================
# Property 6: Batched Price Lookup
# ============================================================================

class TestBatchedLookup:
    """
    **Feature: coinwatch, Property 6: Batched Price Lookup**
    
    *For any* set of active alerts, one tick performs exactly one feed
    lookup for the distinct uppercase symbols they reference, and no
    lookup at all when there are no active alerts.
    """

    def test_no_alerts_no_feed_call(self):
        feed = FakeFeed()
        report = make_monitor(feed=feed).evaluate()

        assert feed.calls == []
        assert report.alerts_checked == 0
        assert report.triggered == []

    def test_only_triggered_alerts_no_feed_call(self):
        store = MemoryStore()
        alert = store.create("1", "BTC", 1, "above")
        store.mark_triggered(alert.id)
        feed = FakeFeed({"BTC": 10})

        make_monitor(store=store, feed=feed).evaluate()
        assert feed.calls == []

    @given(
        symbols=st.lists(
            st.sampled_from(["btc", "BTC", "eth", "Eth", "sol", "DOGE"]),
            min_size=1,
            max_size=20,
        )
    )
    @settings(max_examples=50, deadline=None)
    def test_distinct_symbols_single_call(self, symbols: list[str]):
        store = MemoryStore()
        for symbol in symbols:
            store.create("1", symbol, 1_000_000, "above")
        feed = FakeFeed()

        report = make_monitor(store=store, feed=feed).evaluate()

        expected = sorted({s.upper() for s in symbols})
        assert feed.calls == [expected]
        assert report.symbols_requested == len(expected)
        assert report.alerts_checked == len(symbols)


# ============================================================================
# Property 7: Fire Exactly Once Per Crossing
# ============================================================================

class TestFireOnce:
    """
    **Feature: coinwatch, Property 7: Fire Exactly Once Per Crossing**
    
    *For any* alert whose condition is met, the tick notifies its owner
    once and marks it triggered; later ticks never notify it again.
    """

    def test_btc_crossing_notifies_once(self):
        store = MemoryStore()
        alert = store.create(42, "BTC", 50000, "above")
        feed = FakeFeed({"BTC": 50000.0})
        notifier = RecordingNotifier()
        monitor = make_monitor(store=store, feed=feed, notifier=notifier)

        first = monitor.evaluate()

        assert notifier.sent == [(ChatId("42"), "BTC", 50000.0, 50000, "above")]
        assert first.triggered == [alert.id]
        assert store.get(alert.id).triggered is True
        assert "PRICE ALERT" in notifier.messages[0][1]

        second = monitor.evaluate()

        assert len(notifier.sent) == 1
        assert len(feed.calls) == 1
        assert second.triggered == []

    def test_eth_between_targets_fires_nothing(self):
        store = MemoryStore()
        upper = store.create("1", "ETH", 3000, "above")
        lower = store.create("1", "ETH", 2000, "below")
        notifier = RecordingNotifier()

        report = make_monitor(
            store=store, feed=FakeFeed({"ETH": 2500}), notifier=notifier
        ).evaluate()

        assert notifier.sent == []
        assert report.triggered == []
        assert store.get(upper.id).triggered is False
        assert store.get(lower.id).triggered is False

    @given(
        target=st.floats(min_value=0.01, max_value=1e6, allow_nan=False, allow_infinity=False),
        ratio=st.floats(min_value=0.5, max_value=1.5, allow_nan=False),
        condition=st.sampled_from(["above", "below"]),
    )
    @settings(max_examples=100, deadline=None)
    def test_fires_iff_crossed(self, target: float, ratio: float, condition: str):
        price = target * ratio
        store = MemoryStore()
        alert = store.create("1", "XRP", target, condition)
        notifier = RecordingNotifier()

        make_monitor(store=store, feed=FakeFeed({"XRP": price}), notifier=notifier).evaluate()

        crossed = price >= target if condition == "above" else price <= target
        assert (len(notifier.sent) == 1) == crossed
        assert store.get(alert.id).triggered is crossed

    def test_lowercase_alert_symbol_matches_feed(self):
        store = MemoryStore()
        alert = store.create("1", "sol", 100, "below")
        notifier = RecordingNotifier()

        make_monitor(store=store, feed=FakeFeed({"SOL": 99.5}), notifier=notifier).evaluate()

        assert notifier.sent[0][1] == "SOL"
        assert store.get(alert.id).triggered is True

    def test_sqlite_backed_crossing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "alerts.db")
            fired = store.create("7", "BTC", 60000, "below")
            waiting = store.create("7", "BTC", 70000, "above")
            notifier = RecordingNotifier()
            monitor = make_monitor(
                store=store, feed=FakeFeed({"BTC": 59000}), notifier=notifier
            )

            monitor.evaluate()
            monitor.evaluate()

            assert [n[3] for n in notifier.sent] == [60000]
            assert [a.id for a in store.list_active()] == [waiting.id]
            assert store.get(fired.id).triggered is True


# ============================================================================
# Property 8: Failure Isolation
# ============================================================================

class TestFailureIsolation:
    """
    **Feature: coinwatch, Property 8: Failure Isolation**
    
    *For any* failure of the feed, the store or the notifier, the tick
    completes without raising and unaffected alerts are still processed.
    """

    def test_feed_outage_leaves_all_alerts_active(self):
        store = MemoryStore()
        alerts = [
            store.create("1", "BTC", 1, "above"),
            store.create("1", "ETH", 1, "above"),
            store.create("2", "SOL", 1, "above"),
        ]
        notifier = RecordingNotifier()
        feed = FakeFeed(error=PriceFeedUnavailable("connection refused"))

        report = make_monitor(store=store, feed=feed, notifier=notifier).evaluate()

        assert report.feed_unavailable is True
        assert notifier.sent == []
        assert {a.id for a in store.list_active()} == {a.id for a in alerts}

    def test_unexpected_feed_error_is_contained(self):
        store = MemoryStore()
        store.create("1", "BTC", 1, "above")
        feed = FakeFeed(error=KeyError("lastPrice"))

        report = make_monitor(store=store, feed=feed).evaluate()

        assert report.feed_unavailable is True
        assert len(store.list_active()) == 1

    def test_missing_symbol_stays_active(self):
        store = MemoryStore()
        known = store.create("1", "BTC", 1, "above")
        unknown = store.create("1", "NOTACOIN", 1, "above")

        report = make_monitor(store=store, feed=FakeFeed({"BTC": 2})).evaluate()

        assert report.triggered == [known.id]
        assert report.prices_resolved == 1
        assert [a.id for a in store.list_active()] == [unknown.id]

    def test_failed_delivery_still_marks_triggered(self):
        store = MemoryStore()
        alert = store.create("1", "BTC", 1, "above")
        notifier = RecordingNotifier(result=False)
        monitor = make_monitor(store=store, feed=FakeFeed({"BTC": 2}), notifier=notifier)

        report = monitor.evaluate()
        monitor.evaluate()

        assert report.notification_failures == 1
        assert report.triggered == [alert.id]
        assert store.get(alert.id).triggered is True
        assert len(notifier.sent) == 1

    def test_raising_notifier_does_not_stop_the_tick(self):
        store = MemoryStore()
        broken = store.create("1", "BTC", 1, "above")
        fine = store.create("1", "ETH", 1, "above")
        notifier = RecordingNotifier(fail_for={"BTC"})

        report = make_monitor(
            store=store, feed=FakeFeed({"BTC": 2, "ETH": 2}), notifier=notifier
        ).evaluate()

        assert report.notification_failures == 1
        assert set(report.triggered) == {broken.id, fine.id}
        assert store.list_active() == []

    def test_store_write_failure_keeps_alert_active(self):
        store = FlakyStore()
        stuck = store.create("1", "BTC", 1, "above")
        fired = store.create("1", "ETH", 1, "above")
        store.fail_ids = {stuck.id}
        notifier = RecordingNotifier()

        report = make_monitor(
            store=store, feed=FakeFeed({"BTC": 2, "ETH": 2}), notifier=notifier
        ).evaluate()

        assert report.store_failures == 1
        assert report.triggered == [fired.id]
        assert [a.id for a in store.list_active()] == [stuck.id]
        assert len(notifier.sent) == 2

    def test_malformed_row_does_not_block_valid_alerts(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "alerts.db"
            store = DataStore(db_path)
            valid = store.create("1", "BTC", 100, "above")
            conn = sqlite3.connect(db_path)
            try:
                conn.execute(
                    "INSERT INTO alerts VALUES (?, ?, ?, ?, ?, ?, ?)",
                    ("bad", "", "ETH", 5, "above", 0, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
            notifier = RecordingNotifier()

            report = make_monitor(
                store=store, feed=FakeFeed({"BTC": 200, "ETH": 10}), notifier=notifier
            ).evaluate()

            assert report.store_failures == 0
            assert report.triggered == [valid.id]
            assert [n[1] for n in notifier.sent] == ["BTC"]

    def test_alert_removed_mid_tick_is_not_reported_triggered(self):
        store = MemoryStore()
        alert = store.create("1", "BTC", 1, "above")

        class RemovingNotifier(RecordingNotifier):
            def send_message(self, destination, text) -> bool:
                store.remove(alert.id)
                return super().send_message(destination, text)

        notifier = RemovingNotifier()
        report = make_monitor(store=store, feed=FakeFeed({"BTC": 2}), notifier=notifier).evaluate()

        assert len(notifier.sent) == 1
        assert report.triggered == []
        assert report.stale_notifications == 1
        assert store.get(alert.id) is None

    def test_store_read_failure_skips_tick(self):
        store = FlakyStore(fail_listing=True)
        feed = FakeFeed({"BTC": 2})

        report = make_monitor(store=store, feed=feed).evaluate()

        assert report.store_failures == 1
        assert feed.calls == []


# ============================================================================
# Property 9: Non-overlapping Ticks
# ============================================================================

class TestTickOverlap:
    """
    **Feature: coinwatch, Property 9: Non-overlapping Ticks**
    
    *For any* tick requested while another one is running, the request
    is skipped and the running tick is unaffected.
    """

    def test_concurrent_tick_is_skipped(self):
        entered = threading.Event()
        release = threading.Event()

        class BlockingNotifier(RecordingNotifier):
            def send_message(self, destination, text) -> bool:
                entered.set()
                release.wait(5)
                return super().send_message(destination, text)

        store = MemoryStore()
        alert = store.create("1", "BTC", 1, "above")
        notifier = BlockingNotifier()
        monitor = make_monitor(store=store, feed=FakeFeed({"BTC": 2}), notifier=notifier)

        reports: list[TickReport] = []
        worker = threading.Thread(target=lambda: reports.append(monitor.evaluate()))
        worker.start()
        assert entered.wait(5)

        overlapping = monitor.evaluate()
        release.set()
        worker.join(5)

        assert overlapping.skipped is True
        assert "skipped" in overlapping.summary()
        assert reports[0].triggered == [alert.id]
        assert len(notifier.sent) == 1


# ============================================================================
# Lifecycle
# ============================================================================

class TestLifecycle:
    """Start and stop behaviour of the monitor."""

    def test_start_is_idempotent(self):
        scheduler = FakeScheduler()
        monitor = make_monitor(scheduler=scheduler)

        monitor.start()
        monitor.start()

        assert scheduler.start_calls == 1
        assert monitor.running is True
        assert scheduler.callback == monitor.evaluate

    def test_stop_without_start_is_noop(self):
        scheduler = FakeScheduler()
        monitor = make_monitor(scheduler=scheduler)

        monitor.stop()

        assert scheduler.stop_calls == 0
        assert monitor.running is False

    def test_stop_after_start(self):
        scheduler = FakeScheduler()
        monitor = make_monitor(scheduler=scheduler)

        monitor.start()
        monitor.stop()
        monitor.stop()

        assert scheduler.stop_calls == 1
        assert monitor.running is False

    def test_scheduler_failure_propagates(self):
        monitor = make_monitor(scheduler=FakeScheduler(error=SchedulerError("no threads")))

        with pytest.raises(SchedulerError):
            monitor.start()
        assert monitor.running is False

    def test_default_scheduler_interval(self):
        monitor = AlertMonitor(MemoryStore(), FakeFeed(), RecordingNotifier(), interval_seconds=5)
        assert monitor.scheduler.interval_seconds == 5
        assert monitor.running is False
