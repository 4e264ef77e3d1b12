"""SQLite data store for coinwatch."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from coinwatch.db.base import AlertStore, OwnerLike, PortfolioStore
from coinwatch.exceptions import StoreError
from coinwatch.models import Alert, ChatId, Condition, PortfolioHolding

logger = logging.getLogger(__name__)


class DataStore(AlertStore, PortfolioStore):
    """SQLite-based data store for coinwatch.

    Every operation opens its own connection, so the store can be shared
    between the alert monitor thread and the command layer.
    """

    REQUIRED_TABLES = [
        "alerts",
        "portfolio_holdings",
    ]

    # Seconds a writer waits for a competing lock before failing
    BUSY_TIMEOUT = 30.0

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection.

        Raises:
            StoreError: If the database file cannot be opened.
        """
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.BUSY_TIMEOUT)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Alerts table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS alerts (
                    id TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    target_price REAL NOT NULL,
                    condition TEXT NOT NULL CHECK (condition IN ('above', 'below')),
                    triggered INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_alerts_triggered ON alerts (triggered)"
            )
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_alerts_owner ON alerts (owner)"
            )

            # Portfolio table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS portfolio_holdings (
                    id TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    amount REAL NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    @staticmethod
    def _row_to_alert(row: sqlite3.Row) -> Alert:
        return Alert(
            id=row["id"],
            owner=row["owner"],
            symbol=row["symbol"],
            target_price=row["target_price"],
            condition=row["condition"],
            triggered=bool(row["triggered"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _rows_to_alerts(self, rows: list[sqlite3.Row]) -> list[Alert]:
        """Convert rows, skipping any that no longer form a valid alert."""
        alerts = []
        for row in rows:
            try:
                alerts.append(self._row_to_alert(row))
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed alert row {row['id']!r}: {e}")
        return alerts

    # ==================== Alerts ====================

    def create(
        self,
        owner: OwnerLike,
        symbol: str,
        target_price: float,
        condition: Condition,
    ) -> Alert:
        """Save a new alert to the database.

        Args:
            owner: Destination to notify.
            symbol: Asset ticker.
            target_price: Threshold price.
            condition: ``"above"`` or ``"below"``.

        Returns:
            The stored alert.
        """
        alert = Alert(
            owner=ChatId(owner),
            symbol=symbol,
            target_price=target_price,
            condition=condition,
        )
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO alerts (id, owner, symbol, target_price, condition, triggered, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    alert.id,
                    str(alert.owner),
                    alert.symbol,
                    alert.target_price,
                    alert.condition,
                    0,
                    alert.created_at.isoformat(),
                ),
            )
            conn.commit()
            return alert
        finally:
            conn.close()

    def get(self, alert_id: str) -> Optional[Alert]:
        """Get an alert by ID.

        Args:
            alert_id: Alert ID.

        Returns:
            Alert if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, owner, symbol, target_price, condition, triggered, created_at
                FROM alerts
                WHERE id = ?
                """,
                (alert_id,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_alert(row)
            return None
        finally:
            conn.close()

    def remove(self, alert_id: str) -> bool:
        """Delete an alert.

        Args:
            alert_id: ID of the alert to delete.

        Returns:
            True if a row was deleted.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM alerts WHERE id = ?", (alert_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def list_by_owner(self, owner: OwnerLike) -> list[Alert]:
        """Get all alerts of one owner, newest first."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, owner, symbol, target_price, condition, triggered, created_at
                FROM alerts
                WHERE owner = ?
                ORDER BY created_at DESC
                """,
                (str(ChatId(owner)),),
            )
            return self._rows_to_alerts(cursor.fetchall())
        finally:
            conn.close()

    def list_active(self) -> list[Alert]:
        """Get all alerts that have not triggered yet.

        Rows that fail validation are logged and left out.

        Raises:
            StoreError: If the query fails.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, owner, symbol, target_price, condition, triggered, created_at
                FROM alerts
                WHERE triggered = 0
                ORDER BY created_at
                """
            )
            return self._rows_to_alerts(cursor.fetchall())
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list active alerts: {e}") from e
        finally:
            conn.close()

    def mark_triggered(self, alert_id: str) -> bool:
        """Flip an alert to triggered if it is still active.

        The conditional update makes the transition a compare-and-set, so
        two concurrent callers can never both observe success.

        Args:
            alert_id: Alert ID.

        Returns:
            True if this call changed the row.

        Raises:
            StoreError: If the update could not be committed.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE alerts SET triggered = 1 WHERE id = ? AND triggered = 0",
                (alert_id,),
            )
            conn.commit()
            return cursor.rowcount == 1
        except sqlite3.Error as e:
            raise StoreError(f"Failed to mark alert {alert_id} triggered: {e}") from e
        finally:
            conn.close()

    # ==================== Portfolio ====================

    def add_holding(self, owner: OwnerLike, symbol: str, amount: float) -> PortfolioHolding:
        """Record a holding.

        Args:
            owner: Owner of the holding.
            symbol: Asset ticker.
            amount: Positive number of coins.

        Returns:
            The stored holding.
        """
        holding = PortfolioHolding(owner=ChatId(owner), symbol=symbol, amount=amount)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO portfolio_holdings (id, owner, symbol, amount)
                VALUES (?, ?, ?, ?)
                """,
                (holding.id, str(holding.owner), holding.symbol, holding.amount),
            )
            conn.commit()
            return holding
        finally:
            conn.close()

    def list_holdings(self, owner: OwnerLike) -> list[PortfolioHolding]:
        """Get all holdings of one owner."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, owner, symbol, amount
                FROM portfolio_holdings
                WHERE owner = ?
                ORDER BY rowid
                """,
                (str(ChatId(owner)),),
            )
            return [
                PortfolioHolding(
                    id=row["id"],
                    owner=row["owner"],
                    symbol=row["symbol"],
                    amount=row["amount"],
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def remove_holding(self, owner: OwnerLike, symbol: str) -> bool:
        """Remove the first holding of ``symbol`` for ``owner``.

        Returns:
            True if a holding was removed.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                DELETE FROM portfolio_holdings
                WHERE rowid = (
                    SELECT rowid FROM portfolio_holdings
                    WHERE owner = ? AND UPPER(symbol) = ?
                    ORDER BY rowid
                    LIMIT 1
                )
                """,
                (str(ChatId(owner)), symbol.strip().upper()),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            cursor.execute("SELECT COUNT(*) as count FROM alerts WHERE triggered = 0")
            stats["active_alerts"] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
