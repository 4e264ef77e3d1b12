"""Text formatting helpers for prices, volumes and alert messages."""


def format_price(price: float) -> str:
    """Format a price with precision suited to its magnitude.

    Args:
        price: Price in quote currency.

    Returns:
        ``"50,000.00"`` for prices >= 1, four decimals down to 0.01,
        eight decimals below that.
    """
    if price >= 1:
        return f"{price:,.2f}"
    elif price >= 0.01:
        return f"{price:.4f}"
    return f"{price:.8f}"


def format_volume(volume: float) -> str:
    """Format a volume with a B/M/K suffix."""
    if volume >= 1_000_000_000:
        return f"${volume / 1_000_000_000:.2f}B"
    elif volume >= 1_000_000:
        return f"${volume / 1_000_000:.2f}M"
    elif volume >= 1_000:
        return f"${volume / 1_000:.2f}K"
    return f"${volume:.2f}"


def format_change(change_percent: float) -> str:
    """Format a percentage change with an explicit sign."""
    return f"{change_percent:+.2f}%"


_MARKDOWN_SPECIAL = ("\\", "_", "*", "`", "[")


def escape_markdown(text: str) -> str:
    """Escape characters that Telegram's legacy Markdown treats as markup."""
    for char in _MARKDOWN_SPECIAL:
        text = text.replace(char, "\\" + char)
    return text


def render_alert_message(
    symbol: str,
    current_price: float,
    target_price: float,
    condition: str,
) -> str:
    """Render the Markdown text sent when an alert fires."""
    marker = "🔼" if condition == "above" else "🔽"
    symbol = escape_markdown(symbol)
    condition = escape_markdown(condition)
    return (
        "🔔 *PRICE ALERT!*\n\n"
        f"{symbol} crossed your target!\n\n"
        f"Current: ${format_price(current_price)}\n"
        f"Your target: ${format_price(target_price)} ({condition})\n"
        f"{marker} Target reached!"
    )
