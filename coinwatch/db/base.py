"""Storage interfaces for coinwatch.

The alert monitor only depends on :class:`AlertStore`. Both the in-memory
and the SQLite backends implement the same contract, so either can be
injected without changing monitor behaviour.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from coinwatch.models import Alert, ChatId, Condition, PortfolioHolding


OwnerLike = Union[ChatId, str, int]


class AlertStore(ABC):
    """Durable collection of alerts keyed by id."""

    @abstractmethod
    def create(
        self,
        owner: OwnerLike,
        symbol: str,
        target_price: float,
        condition: Condition,
    ) -> Alert:
        """Create a new, untriggered alert.

        Args:
            owner: Destination to notify when the alert fires.
            symbol: Asset ticker (normalized to uppercase).
            target_price: Positive threshold price.
            condition: ``"above"`` or ``"below"``.

        Returns:
            The stored alert with its assigned id.
        """
        pass

    @abstractmethod
    def get(self, alert_id: str) -> Optional[Alert]:
        """Get an alert by id.

        Returns:
            Alert if found, None otherwise.
        """
        pass

    @abstractmethod
    def remove(self, alert_id: str) -> bool:
        """Delete an alert in any state.

        Returns:
            True if an alert was removed, False if the id was unknown.
        """
        pass

    @abstractmethod
    def list_by_owner(self, owner: OwnerLike) -> list[Alert]:
        """Get all alerts (active and triggered) belonging to ``owner``."""
        pass

    @abstractmethod
    def list_active(self) -> list[Alert]:
        """Get every alert that has not triggered yet.

        Order is not significant.
        """
        pass

    @abstractmethod
    def mark_triggered(self, alert_id: str) -> bool:
        """Atomically move an alert from active to triggered.

        Idempotent: calling it on an already triggered or unknown id is a
        no-op. The change is committed before the call returns.

        Returns:
            True if this call performed the transition, False otherwise.

        Raises:
            StoreError: If the write could not be committed.
        """
        pass


class PortfolioStore(ABC):
    """Collection of portfolio holdings per owner."""

    @abstractmethod
    def add_holding(self, owner: OwnerLike, symbol: str, amount: float) -> PortfolioHolding:
        """Record a holding for ``owner``."""
        pass

    @abstractmethod
    def list_holdings(self, owner: OwnerLike) -> list[PortfolioHolding]:
        """Get all holdings for ``owner``."""
        pass

    @abstractmethod
    def remove_holding(self, owner: OwnerLike, symbol: str) -> bool:
        """Remove the holding of ``symbol`` (case-insensitive) for ``owner``.

        Returns:
            True if a holding was removed.
        """
        pass
