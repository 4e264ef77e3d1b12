"""Portfolio commands for coinwatch CLI.

Handles adding, removing and valuing coin holdings.
"""

import math
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from coinwatch.cli.common import chat_option, error_panel, get_config, get_feed, get_store, resolve_chat
from coinwatch.exceptions import PriceFeedError
from coinwatch.formatting import format_change, format_price
from coinwatch.models import PortfolioHolding, PriceSnapshot

console = Console()


def value_portfolio(
    holdings: list[PortfolioHolding],
    prices: dict[str, PriceSnapshot],
) -> dict:
    """Value holdings at current prices.
    
    Args:
        holdings: Holdings to value.
        prices: Snapshots keyed by uppercase symbol.
        
    Returns:
        Dictionary with per-holding rows, the total value, and the
        symbols that could not be priced.
    """
    positions = []
    unpriced = []
    total_value = 0.0

    for holding in holdings:
        snapshot = prices.get(holding.symbol.upper())
        if snapshot is None:
            unpriced.append(holding.symbol)
            continue

        value = holding.amount * snapshot.price
        total_value += value
        positions.append({
            "symbol": holding.symbol,
            "amount": holding.amount,
            "price": snapshot.price,
            "value": value,
            "change_percent_24h": snapshot.change_percent_24h,
        })

    return {
        "positions": positions,
        "total_value": total_value,
        "unpriced": unpriced,
    }


@click.group("portfolio", invoke_without_command=True)
@click.pass_context
def portfolio(ctx: click.Context) -> None:
    """View and manage portfolio holdings.
    
    \b
    Examples:
      coinwatch portfolio                # Show holdings
      coinwatch portfolio add BTC 0.5    # Add 0.5 BTC
      coinwatch portfolio remove BTC     # Remove BTC
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(show)


@portfolio.command("show")
@chat_option
def show(chat: Optional[str] = None) -> None:
    """Show holdings valued at current prices."""
    config = get_config()
    owner = resolve_chat(config, chat)

    holdings = get_store(config).list_holdings(owner)
    if not holdings:
        console.print(Panel(
            "[dim]Portfolio is empty.\n\n"
            "Add coins with: coinwatch portfolio add <COIN> <AMOUNT>\n"
            "Example: coinwatch portfolio add BTC 0.5[/dim]",
            title="[bold]Your Portfolio[/bold]",
            border_style="dim",
        ))
        return

    try:
        prices = get_feed(config).get_prices(h.symbol for h in holdings)
    except PriceFeedError as e:
        error_panel(f"Failed to fetch prices:\n\n{e}")
        raise SystemExit(1)

    result = value_portfolio(holdings, prices)

    table = Table(
        title="Your Portfolio",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Coin", style="bold")
    table.add_column("Amount", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("24h", justify="right")

    for row in result["positions"]:
        color = "green" if row["change_percent_24h"] >= 0 else "red"
        table.add_row(
            row["symbol"],
            f"{row['amount']:.4f}",
            f"${format_price(row['price'])}",
            f"${row['value']:,.2f}",
            f"[{color}]{format_change(row['change_percent_24h'])}[/{color}]",
        )

    console.print(table)
    if result["unpriced"]:
        console.print(f"[yellow]No price for: {', '.join(result['unpriced'])}[/yellow]")
    console.print(f"\n[bold]Total value:[/bold] ${result['total_value']:,.2f}")
    console.print(f"[dim]Updated: {datetime.now().strftime('%H:%M:%S')}[/dim]")


@portfolio.command("add")
@click.argument("symbol")
@click.argument("amount", type=float)
@chat_option
def add(symbol: str, amount: float, chat: Optional[str]) -> None:
    """Add AMOUNT coins of SYMBOL to the portfolio."""
    if not math.isfinite(amount) or amount <= 0:
        error_panel("Invalid amount. Enter a positive number.")
        raise SystemExit(1)

    config = get_config()
    try:
        holding = get_store(config).add_holding(resolve_chat(config, chat), symbol, amount)
    except Exception as e:
        error_panel(f"Failed to add holding:\n\n{e}")
        raise SystemExit(1)

    message = f"[green]✓ Added to portfolio: {holding.symbol} {holding.amount}[/green]"
    try:
        snapshot = get_feed(config).get_price(holding.symbol)
    except PriceFeedError:
        snapshot = None
    if snapshot is not None:
        message += f" [dim](≈ ${holding.amount * snapshot.price:,.2f})[/dim]"
    console.print(message)


@portfolio.command("remove")
@click.argument("symbol")
@chat_option
def remove(symbol: str, chat: Optional[str]) -> None:
    """Remove SYMBOL from the portfolio."""
    config = get_config()
    removed = get_store(config).remove_holding(resolve_chat(config, chat), symbol)

    if removed:
        console.print(f"[green]✓ Removed {symbol.upper()} from portfolio[/green]")
    else:
        console.print(f"[yellow]{symbol.upper()} not found in portfolio[/yellow]")
