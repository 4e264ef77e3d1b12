"""Base notifier interface for coinwatch."""

from abc import ABC, abstractmethod

from coinwatch.formatting import render_alert_message
from coinwatch.models import ChatId, Condition


class Notifier(ABC):
    """Delivers alert messages to a destination chat."""

    @abstractmethod
    def send_message(self, destination: ChatId, text: str) -> bool:
        """Deliver a rendered message.

        Args:
            destination: Chat to deliver to.
            text: Markdown message text.

        Returns:
            True if delivery was confirmed, False otherwise.
        """
        pass

    def notify(
        self,
        destination: ChatId,
        symbol: str,
        current_price: float,
        target_price: float,
        condition: Condition,
    ) -> bool:
        """Send the message for a fired alert.

        Returns:
            True if delivery was confirmed, False otherwise.
        """
        text = render_alert_message(symbol, current_price, target_price, condition)
        return self.send_message(destination, text)
