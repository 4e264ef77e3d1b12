"""AI commentary command for coinwatch CLI."""

import click
from rich.console import Console
from rich.panel import Panel

from coinwatch.cli.common import error_panel, get_config, get_feed
from coinwatch.cli.data import render_snapshot
from coinwatch.config import get_openai_key, get_openai_model
from coinwatch.exceptions import PriceFeedError

console = Console()

SENTIMENT_STYLES = {
    "bullish": ("green", "🟢"),
    "bearish": ("red", "🔴"),
    "neutral": ("yellow", "🟡"),
}


@click.command()
@click.argument("symbol")
def analyze(symbol: str) -> None:
    """Show AI commentary on a coin's current market data.
    
    SYMBOL is the coin ticker (e.g., BTC, ETH).
    
    Uses the OpenAI API when a key is configured, otherwise a
    rule-based summary of the 24h move.
    
    \b
    Examples:
      coinwatch analyze BTC
      coinwatch analyze sol
    """
    from coinwatch.agents.analyst import analyze_snapshot

    symbol = symbol.upper()
    config = get_config()

    try:
        snapshot = get_feed(config).get_price(symbol)
    except PriceFeedError as e:
        error_panel(f"Failed to fetch price:\n\n{e}")
        raise SystemExit(1)

    if snapshot is None:
        console.print(f"[yellow]No price found for {symbol}[/yellow]")
        raise SystemExit(1)

    console.print(render_snapshot(snapshot))

    with console.status(f"Analyzing {symbol}..."):
        analysis = analyze_snapshot(
            snapshot,
            api_key=get_openai_key(config),
            model=get_openai_model(config),
        )

    color, marker = SENTIMENT_STYLES[analysis.sentiment]
    points = "\n".join(f"  • {point}" for point in analysis.key_points)
    source = "AI analysis" if analysis.source == "ai" else "Rule-based analysis"

    console.print(Panel(
        f"{analysis.summary}\n\n"
        f"[bold]Sentiment:[/bold] [{color}]{marker} {analysis.sentiment.upper()}[/{color}]\n\n"
        f"[bold]Key points:[/bold]\n{points}\n\n"
        f"[bold]Recommendation:[/bold] {analysis.recommendation}",
        title=f"[bold cyan]{symbol} - {source}[/bold cyan]",
        border_style="cyan",
    ))
