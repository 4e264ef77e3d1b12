"""Notifier that prints alerts to the terminal."""

from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from coinwatch.models import ChatId
from coinwatch.notifiers.base import Notifier


class ConsoleNotifier(Notifier):
    """Renders alert messages as rich panels.

    Used by ``coinwatch monitor`` when no Telegram token is configured.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def send_message(self, destination: ChatId, text: str) -> bool:
        self.console.print(Panel(
            Markdown(text),
            title=f"[bold yellow]Alert for {destination}[/bold yellow]",
            border_style="yellow",
        ))
        return True
