"""In-memory store backend."""

import threading
from typing import Optional

from coinwatch.db.base import AlertStore, OwnerLike, PortfolioStore
from coinwatch.models import Alert, ChatId, Condition, PortfolioHolding


class MemoryStore(AlertStore, PortfolioStore):
    """Dict-backed store, used for tests and for running without a database.

    A single lock guards both maps; every operation holds it only for the
    duration of one dictionary read or write.
    """

    def __init__(self):
        self._alerts: dict[str, Alert] = {}
        self._holdings: dict[str, PortfolioHolding] = {}
        self._lock = threading.Lock()

    # ==================== Alerts ====================

    def create(
        self,
        owner: OwnerLike,
        symbol: str,
        target_price: float,
        condition: Condition,
    ) -> Alert:
        alert = Alert(
            owner=ChatId(owner),
            symbol=symbol,
            target_price=target_price,
            condition=condition,
        )
        with self._lock:
            self._alerts[alert.id] = alert
        return alert

    def get(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            return self._alerts.get(alert_id)

    def remove(self, alert_id: str) -> bool:
        with self._lock:
            return self._alerts.pop(alert_id, None) is not None

    def list_by_owner(self, owner: OwnerLike) -> list[Alert]:
        owner = ChatId(owner)
        with self._lock:
            return [a for a in self._alerts.values() if a.owner == owner]

    def list_active(self) -> list[Alert]:
        with self._lock:
            return [a for a in self._alerts.values() if not a.triggered]

    def mark_triggered(self, alert_id: str) -> bool:
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None or alert.triggered:
                return False
            self._alerts[alert_id] = alert.model_copy(update={"triggered": True})
            return True

    # ==================== Portfolio ====================

    def add_holding(self, owner: OwnerLike, symbol: str, amount: float) -> PortfolioHolding:
        holding = PortfolioHolding(owner=ChatId(owner), symbol=symbol, amount=amount)
        with self._lock:
            self._holdings[holding.id] = holding
        return holding

    def list_holdings(self, owner: OwnerLike) -> list[PortfolioHolding]:
        owner = ChatId(owner)
        with self._lock:
            return [h for h in self._holdings.values() if h.owner == owner]

    def remove_holding(self, owner: OwnerLike, symbol: str) -> bool:
        owner = ChatId(owner)
        symbol = symbol.strip().upper()
        with self._lock:
            for holding_id, holding in self._holdings.items():
                if holding.owner == owner and holding.symbol == symbol:
                    del self._holdings[holding_id]
                    return True
        return False
