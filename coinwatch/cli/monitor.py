"""Alert monitor command for coinwatch CLI.

Hosts the alert monitoring engine: starts it, keeps the process alive,
and stops it on Ctrl+C or SIGTERM.
"""

import logging
import signal
import threading
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from coinwatch.cli.common import error_panel, get_config, get_feed, get_store
from coinwatch.config import get_interval, get_telegram_token
from coinwatch.exceptions import ConfigError, NotificationError, SchedulerError, StoreError

console = Console()
logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT_SECONDS = 30.0


def _get_notifier(config: dict):
    """Get the Telegram notifier, or the console notifier without a token."""
    token = get_telegram_token(config)
    if token:
        from coinwatch.notifiers.telegram import TelegramNotifier

        return TelegramNotifier(token)

    from coinwatch.notifiers.console import ConsoleNotifier

    logger.warning("No Telegram bot token configured; alerts will be printed to the console")
    return ConsoleNotifier(console)


def build_monitor(config: dict, interval: Optional[float] = None, run_immediately: bool = True):
    """Wire an AlertMonitor from configuration."""
    from coinwatch.monitor.engine import AlertMonitor
    from coinwatch.monitor.scheduler import IntervalScheduler

    interval = interval or get_interval(config)
    return AlertMonitor(
        store=get_store(config),
        feed=get_feed(config),
        notifier=_get_notifier(config),
        scheduler=IntervalScheduler(interval, run_immediately=run_immediately),
    )


@click.command()
@click.option(
    "-i", "--interval",
    type=click.FloatRange(min=1.0),
    default=None,
    help="Seconds between alert checks (default: monitor.interval_seconds, 120).",
)
@click.option("--once", is_flag=True, help="Run a single check and exit.")
def monitor(interval: Optional[float], once: bool) -> None:
    """Run the price alert monitor.
    
    Checks every active alert against live prices on a fixed interval
    and sends a notification once per alert when its target is reached.
    
    Press Ctrl+C to stop.
    
    \b
    Examples:
      coinwatch monitor
      coinwatch monitor --interval 60
      coinwatch monitor --once
    """
    config = get_config()

    if config.get("storage", {}).get("backend") == "memory":
        error_panel(
            "The monitor cannot use storage.backend = \"memory\": alerts created by\n"
            "other coinwatch commands live in the database and would never be seen.\n\n"
            "Set storage.backend = \"sqlite\" in your config.",
            title="Configuration Error",
        )
        raise SystemExit(1)

    try:
        alert_monitor = build_monitor(config, interval)
        stats = alert_monitor.store.get_stats()
    except (ConfigError, ValueError) as e:
        error_panel(str(e), title="Configuration Error")
        raise SystemExit(1)
    except StoreError as e:
        error_panel(f"Failed to open alert database:\n\n{e}")
        raise SystemExit(1)

    console.print(
        f"[dim]Watching {stats['active_alerts']} active of {stats['alerts']} stored alert(s)[/dim]"
    )

    if once:
        report = alert_monitor.evaluate()
        console.print(f"[dim]{report.summary()}[/dim]")
        if report.feed_unavailable:
            console.print("[yellow]Price feed was unavailable[/yellow]")
        return

    verify = getattr(alert_monitor.notifier, "verify", None)
    if verify is not None:
        try:
            bot_name = verify()
        except NotificationError as e:
            error_panel(str(e), title="Telegram Error")
            raise SystemExit(1)
        console.print(f"[dim]Sending alerts as @{bot_name}[/dim]")

    stopped = threading.Event()

    def _handle_sigterm(signum, frame):
        stopped.set()

    previous_handler = signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        alert_monitor.start()
    except SchedulerError as e:
        signal.signal(signal.SIGTERM, previous_handler)
        error_panel(f"Failed to start alert monitor:\n\n{e}")
        raise SystemExit(1)

    console.print(Panel(
        f"Checking alerts every {alert_monitor.scheduler.interval_seconds:g}s\n"
        "[dim]Press Ctrl+C to stop.[/dim]",
        title="[bold]📊 Alert monitoring started[/bold]",
        border_style="cyan",
    ))

    try:
        while not stopped.wait(1.0):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        alert_monitor.stop()
        # Let an in-flight check finish its notifications
        alert_monitor.scheduler.join(timeout=SHUTDOWN_TIMEOUT_SECONDS)
        signal.signal(signal.SIGTERM, previous_handler)
        console.print("\n[dim]Alert monitoring stopped.[/dim]")
