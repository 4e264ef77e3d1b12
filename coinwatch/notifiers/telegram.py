"""Telegram Bot API notifier."""

import logging
from typing import Optional

import requests

from coinwatch.exceptions import NotificationError
from coinwatch.models import ChatId
from coinwatch.notifiers.base import Notifier

logger = logging.getLogger(__name__)


class TelegramNotifier(Notifier):
    """Sends messages through the Telegram ``sendMessage`` endpoint.

    Delivery failures (network errors, rate limits, unknown chats) are
    logged and reported as ``False``; they never raise.
    """

    API_BASE_URL = "https://api.telegram.org"
    DEFAULT_TIMEOUT = 20.0

    def __init__(
        self,
        bot_token: str,
        timeout: float = DEFAULT_TIMEOUT,
        api_base_url: str = API_BASE_URL,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the notifier.

        Args:
            bot_token: Token issued by BotFather.
            timeout: Request timeout in seconds.
            api_base_url: Bot API root, overridable for local Bot API servers.
            session: Optional pre-configured HTTP session.
        """
        if not bot_token:
            raise ValueError("Telegram bot token is required")
        self._api_url = f"{api_base_url.rstrip('/')}/bot{bot_token}"
        self._url = f"{self._api_url}/sendMessage"
        self.timeout = timeout
        self._session = session or requests.Session()

    def send_message(self, destination: ChatId, text: str) -> bool:
        payload = {
            "chat_id": str(destination),
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }
        try:
            response = self._session.post(self._url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Telegram send to {destination} failed: {e}")
            return False

        if response.status_code != 200:
            logger.warning(
                f"Telegram send to {destination} returned {response.status_code}: "
                f"{response.text[:200]}"
            )
            return False

        try:
            ok = bool(response.json().get("ok"))
        except ValueError:
            ok = False
        if not ok:
            logger.warning(f"Telegram rejected message to {destination}: {response.text[:200]}")
        return ok

    def verify(self) -> str:
        """Check the token against the ``getMe`` endpoint.

        Returns:
            The bot's username.

        Raises:
            NotificationError: If the token is rejected or the API is unreachable.
        """
        try:
            response = self._session.get(f"{self._api_url}/getMe", timeout=self.timeout)
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise NotificationError(f"Could not reach the Telegram Bot API: {e}") from e

        if response.status_code != 200 or not body.get("ok"):
            raise NotificationError(
                f"Telegram rejected the bot token: {body.get('description', response.status_code)}"
            )
        return body.get("result", {}).get("username", "")
