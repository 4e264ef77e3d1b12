"""Alert notification channels for coinwatch."""

from coinwatch.notifiers.base import Notifier
from coinwatch.notifiers.console import ConsoleNotifier
from coinwatch.notifiers.telegram import TelegramNotifier

__all__ = [
    "ConsoleNotifier",
    "Notifier",
    "TelegramNotifier",
]
