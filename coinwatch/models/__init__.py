"""Data models for coinwatch."""

from coinwatch.models.alert import VALID_CONDITIONS, Alert, ChatId, Condition
from coinwatch.models.portfolio import PortfolioHolding
from coinwatch.models.snapshot import PriceSnapshot

__all__ = [
    "Alert",
    "ChatId",
    "Condition",
    "PortfolioHolding",
    "PriceSnapshot",
    "VALID_CONDITIONS",
]
