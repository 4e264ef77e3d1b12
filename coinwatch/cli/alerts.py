"""Alert management commands for coinwatch CLI.

Handles creating, listing and removing price alerts. Alerts are
evaluated by ``coinwatch monitor``.
"""

import math
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from coinwatch.cli.common import chat_option, error_panel, get_config, get_store, resolve_chat
from coinwatch.formatting import format_price
from coinwatch.models import VALID_CONDITIONS

console = Console()


def parse_target_price(value: str) -> float:
    """Parse a target price argument.

    Raises:
        ValueError: If the value is not a positive, finite number.
    """
    try:
        price = float(value.replace(",", ""))
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid price: {value!r}. Enter a number.")
    if not math.isfinite(price) or price <= 0:
        raise ValueError(f"Invalid price: {value!r}. Enter a positive number.")
    return price


def parse_condition(value: str) -> str:
    """Parse a condition argument (case-insensitive).

    Raises:
        ValueError: If the condition is not ``above`` or ``below``.
    """
    condition = value.strip().lower()
    if condition not in VALID_CONDITIONS:
        raise ValueError(f"Condition must be 'above' or 'below', got {value!r}.")
    return condition


@click.command("alert")
@click.argument("symbol")
@click.argument("target_price", metavar="PRICE")
@click.argument("condition")
@chat_option
def create_alert(symbol: str, target_price: str, condition: str, chat: Optional[str]) -> None:
    """Create a price alert.
    
    SYMBOL is the coin ticker (e.g., BTC, ETH).
    PRICE is the target price in USDT.
    CONDITION is 'above' or 'below'.
    
    The alert fires once when the price reaches or crosses the target.
    
    \b
    Examples:
      coinwatch alert BTC 50000 above
      coinwatch alert ETH 2000 below --chat 123456789
    """
    try:
        price = parse_target_price(target_price)
        condition = parse_condition(condition)
    except ValueError as e:
        error_panel(
            f"{e}\n\n"
            "[bold]Usage:[/bold] coinwatch alert <COIN> <PRICE> <above/below>\n"
            "[bold]Example:[/bold] coinwatch alert BTC 50000 above",
            title="Invalid Alert",
        )
        raise SystemExit(1)

    config = get_config()
    owner = resolve_chat(config, chat)

    try:
        alert = get_store(config).create(owner, symbol, price, condition)
    except Exception as e:
        error_panel(f"Failed to create alert:\n\n{e}")
        raise SystemExit(1)

    console.print(Panel(
        f"[bold green]Alert Created[/bold green]\n\n"
        f"ID:        {alert.id}\n"
        f"Coin:      {alert.symbol}\n"
        f"Target:    ${format_price(alert.target_price)} ({alert.condition})\n"
        f"Chat:      {alert.owner}",
        title="[bold]New Alert[/bold]",
        border_style="green",
    ))


@click.command("alerts")
@chat_option
@click.option(
    "--remove", "remove_id",
    default=None,
    help="Remove alert with specified ID.",
)
def list_alerts(chat: Optional[str], remove_id: Optional[str]) -> None:
    """Display or manage alerts.
    
    Shows all alerts of the chat. Use --remove ID to delete an alert.
    
    \b
    Examples:
      coinwatch alerts                    # List alerts
      coinwatch alerts --remove 3f2a...   # Remove an alert
    """
    config = get_config()
    owner = resolve_chat(config, chat)

    try:
        store = get_store(config)

        if remove_id is not None:
            alert = store.get(remove_id)
            if alert is None:
                console.print(f"[yellow]Alert with ID {remove_id} not found[/yellow]")
                return

            store.remove(remove_id)
            console.print(f"[green]✓ Removed alert {remove_id} ({alert.describe()})[/green]")
            return

        alerts = store.list_by_owner(owner)
    except Exception as e:
        error_panel(f"Failed to load alerts:\n\n{e}")
        raise SystemExit(1)

    if not alerts:
        console.print(Panel(
            "[dim]No alerts set. Use 'coinwatch alert COIN PRICE above/below' to create one.[/dim]",
            title="[bold]Alerts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title=f"Price Alerts ({owner})",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("ID", style="dim")
    table.add_column("Coin", style="bold")
    table.add_column("Condition")
    table.add_column("Target", justify="right")
    table.add_column("Created", style="dim")
    table.add_column("Status", justify="center")

    for alert in alerts:
        status = "[yellow]✓ Triggered[/yellow]" if alert.triggered else "[green]● Active[/green]"
        table.add_row(
            alert.id,
            alert.symbol,
            alert.condition,
            f"${format_price(alert.target_price)}",
            alert.created_at.strftime("%Y-%m-%d %H:%M"),
            status,
        )

    active = sum(1 for a in alerts if not a.triggered)
    console.print(table)
    console.print(f"\n[dim]Total: {len(alerts)} alerts ({active} active)[/dim]")
    console.print("[dim]Use 'coinwatch alerts --remove ID' to delete an alert[/dim]")
