"""Market data commands for coinwatch CLI.

Handles current prices and top movers.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from coinwatch.cli.common import error_panel, get_config, get_feed
from coinwatch.exceptions import PriceFeedError
from coinwatch.formatting import format_change, format_price, format_volume
from coinwatch.models import PriceSnapshot

console = Console()


def render_snapshot(snapshot: PriceSnapshot) -> Panel:
    """Render a snapshot as a rich panel."""
    color = "green" if snapshot.change_percent_24h >= 0 else "red"
    arrow = "▲" if snapshot.change_percent_24h >= 0 else "▼"
    body = (
        f"[bold]Price:[/bold]   ${format_price(snapshot.price)}\n"
        f"[bold]24h:[/bold]     [{color}]{arrow} {snapshot.change_24h:+,.4g} "
        f"({format_change(snapshot.change_percent_24h)})[/{color}]\n"
        f"[bold]High:[/bold]    ${format_price(snapshot.high_24h)}\n"
        f"[bold]Low:[/bold]     ${format_price(snapshot.low_24h)}\n"
        f"[bold]Volume:[/bold]  {snapshot.volume_24h:,.2f} {snapshot.symbol}"
    )
    if snapshot.quote_volume_24h is not None:
        body += f" ({format_volume(snapshot.quote_volume_24h)})"
    return Panel(body, title=f"[bold]{snapshot.symbol}[/bold]", border_style=color)


@click.command()
@click.argument("symbol")
def price(symbol: str) -> None:
    """Display current price and 24h statistics for a coin.
    
    SYMBOL is the coin ticker (e.g., BTC, ETH, SOL).
    
    \b
    Examples:
      coinwatch price BTC
      coinwatch price eth
    """
    symbol = symbol.upper()
    feed = get_feed(get_config())

    try:
        snapshot = feed.get_price(symbol)
    except PriceFeedError as e:
        error_panel(f"Failed to fetch price:\n\n{e}")
        raise SystemExit(1)

    if snapshot is None:
        console.print(f"[yellow]No price found for {symbol}[/yellow]")
        raise SystemExit(1)

    console.print(render_snapshot(snapshot))


@click.command()
@click.option("--losers", is_flag=True, help="Show biggest losers instead of gainers.")
@click.option("-n", "--limit", default=10, type=click.IntRange(1, 100), help="Number of coins.")
def top(losers: bool, limit: int) -> None:
    """Show the biggest 24h movers.
    
    \b
    Examples:
      coinwatch top
      coinwatch top --losers -n 5
    """
    feed = get_feed(get_config())

    try:
        movers = feed.get_top_movers(limit=limit, losers=losers)
    except PriceFeedError as e:
        error_panel(f"Failed to fetch market data:\n\n{e}")
        raise SystemExit(1)

    table = Table(
        title="Top Losers (24h)" if losers else "Top Gainers (24h)",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Coin", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Volume", justify="right", style="dim")

    color = "red" if losers else "green"
    for rank, snapshot in enumerate(movers, start=1):
        table.add_row(
            str(rank),
            snapshot.symbol,
            f"${format_price(snapshot.price)}",
            f"[{color}]{format_change(snapshot.change_percent_24h)}[/{color}]",
            format_volume(snapshot.quote_volume_24h or 0.0),
        )

    console.print(table)
