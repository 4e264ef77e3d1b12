"""Helpers shared by coinwatch CLI commands."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from coinwatch.config import get_db_path, get_default_chat, load_config
from coinwatch.exceptions import ConfigError

console = Console()
logger = logging.getLogger(__name__)


def error_panel(message: str, title: str = "Error") -> None:
    """Print an error panel."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def get_config(ctx: Optional[click.Context] = None) -> dict:
    """Load configuration, honouring the ``--config`` option of the group."""
    ctx = ctx or click.get_current_context(silent=True)
    config_path: Optional[Path] = None
    if ctx is not None and ctx.obj:
        config_path = ctx.obj.get("config_path")

    try:
        return load_config(config_path)
    except ConfigError as e:
        error_panel(str(e), title="Configuration Error")
        raise SystemExit(1)


def get_store(config: dict):
    """Get the store backend selected in config."""
    backend = config.get("storage", {}).get("backend", "sqlite")
    if backend == "memory":
        from coinwatch.db.memory import MemoryStore

        logger.warning("Using in-memory storage; alerts are lost when the process exits")
        return MemoryStore()

    from coinwatch.db.store import DataStore

    return DataStore(get_db_path(config))


def get_feed(config: dict):
    """Get the configured price feed."""
    from coinwatch.feeds.binance import BinanceFeed

    feed_config = config.get("feed", {})
    return BinanceFeed(
        base_url=feed_config.get("base_url", BinanceFeed.DEFAULT_BASE_URL),
        quote_asset=feed_config.get("quote_asset", BinanceFeed.DEFAULT_QUOTE_ASSET),
        timeout=float(feed_config.get("timeout_seconds", BinanceFeed.DEFAULT_TIMEOUT)),
    )


def resolve_chat(config: dict, chat: Optional[str]) -> str:
    """Pick the destination given on the command line or the configured default."""
    return chat.strip() if chat and chat.strip() else get_default_chat(config)


chat_option = click.option(
    "--chat",
    "chat",
    default=None,
    help="Chat ID the alert or holding belongs to (default: telegram.chat_id).",
)
