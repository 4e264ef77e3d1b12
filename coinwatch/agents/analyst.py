"""Analyst agent producing short commentary on a coin's 24h market data.

When no API key is configured, or the model call or its output fails,
a rule-based analysis computed from the snapshot is returned instead.
"""

import json
import logging
import re
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from coinwatch.agents.base import configure_api_key, create_agent, run_agent_sync
from coinwatch.formatting import format_change, format_price
from coinwatch.models import PriceSnapshot

logger = logging.getLogger(__name__)


VALID_SENTIMENTS = ("bullish", "bearish", "neutral")
SentimentType = Literal["bullish", "bearish", "neutral"]

# Absolute 24h change (percent) above which momentum counts as strong
STRONG_MOVE_PERCENT = 5.0
# Absolute 24h change (percent) above which a positive move counts as bullish
MODERATE_MOVE_PERCENT = 2.0
# Base-asset volume above which activity is described as strong
STRONG_VOLUME = 100_000


ANALYST_INSTRUCTIONS = """You are an expert cryptocurrency analyst.
You receive current 24h market data for one coin and reply with a concise,
data-driven analysis focused on price action, volume and momentum.

Reply with a single JSON object and nothing else:
{
  "summary": "2-3 sentence overview of the current market situation",
  "sentiment": "bullish" | "bearish" | "neutral",
  "key_points": ["3-4 short bullet points with specific insights"],
  "recommendation": "Clear action (buy/hold/sell/wait) with reasoning"
}
"""


class Analysis(BaseModel):
    """AI or rule-based commentary on one coin."""

    summary: str = Field(..., min_length=1)
    sentiment: SentimentType
    key_points: list[str] = Field(default_factory=list)
    recommendation: str = Field(..., min_length=1)
    source: Literal["ai", "fallback"] = Field(default="ai")


def build_prompt(snapshot: PriceSnapshot) -> str:
    """Build the user message describing ``snapshot``."""
    return (
        f"Analyze {snapshot.symbol} based on this data:\n\n"
        f"Current Price: ${format_price(snapshot.price)}\n"
        f"24h Change: {format_change(snapshot.change_percent_24h)}\n"
        f"24h Volume: {snapshot.volume_24h:,.2f}\n"
        f"24h High: ${format_price(snapshot.high_24h)}\n"
        f"24h Low: ${format_price(snapshot.low_24h)}\n"
    )


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_analysis(raw: str) -> Analysis:
    """Parse the agent's JSON reply.

    Accepts replies wrapped in Markdown code fences and the camelCase
    ``keyPoints`` key.

    Raises:
        ValueError: If the reply is not a valid analysis.
    """
    text = _FENCE_RE.sub("", raw.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Analysis is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Analysis must be a JSON object")

    if "key_points" not in data and "keyPoints" in data:
        data["key_points"] = data.pop("keyPoints")
    if isinstance(data.get("sentiment"), str):
        data["sentiment"] = data["sentiment"].strip().lower()
    data["source"] = "ai"

    try:
        return Analysis.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid analysis: {e}") from e


def fallback_analysis(snapshot: PriceSnapshot) -> Analysis:
    """Rule-based analysis derived from the 24h change and range position."""
    change = snapshot.change_percent_24h
    is_positive = change >= 0
    abs_change = abs(change)

    sentiment: SentimentType = "neutral"
    if abs_change > STRONG_MOVE_PERCENT:
        sentiment = "bullish" if is_positive else "bearish"
    elif abs_change > MODERATE_MOVE_PERCENT and is_positive:
        sentiment = "bullish"

    activity = "strong" if snapshot.volume_24h > STRONG_VOLUME else "moderate"
    key_points = [
        f"24h price range: ${format_price(snapshot.low_24h)} - ${format_price(snapshot.high_24h)}",
        f"Current momentum is {'positive' if is_positive else 'negative'} "
        f"with {abs_change:.2f}% change",
        f"Trading volume indicates {activity} market activity",
    ]
    if snapshot.high_24h > snapshot.low_24h:
        position = (snapshot.price - snapshot.low_24h) / (snapshot.high_24h - snapshot.low_24h)
        position = min(max(position, 0.0), 1.0)
        key_points.append(f"Price sits at {position:.0%} of its 24h range")

    if abs_change > STRONG_MOVE_PERCENT:
        direction = "upward" if is_positive else "downward"
        follow = "continuation" if is_positive else "reversal"
        recommendation = (
            f"Strong {direction} momentum detected. "
            f"Monitor closely for potential {follow}."
        )
    else:
        recommendation = "Market showing consolidation. Wait for clearer signals before taking action."

    return Analysis(
        summary=(
            f"{snapshot.symbol} is currently trading at ${format_price(snapshot.price)} "
            f"with a {format_change(change)} change in the last 24 hours."
        ),
        sentiment=sentiment,
        key_points=key_points,
        recommendation=recommendation,
        source="fallback",
    )


def analyze_snapshot(
    snapshot: PriceSnapshot,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> Analysis:
    """Produce commentary for ``snapshot``.

    Args:
        snapshot: Current market data for the coin.
        api_key: OpenAI API key; without one the rule-based analysis is used.
        model: Optional model override.

    Returns:
        The AI analysis, or the fallback analysis on any failure.
    """
    if not api_key:
        return fallback_analysis(snapshot)

    try:
        configure_api_key(api_key)
        agent = create_agent(
            name="Crypto Analyst",
            instructions=ANALYST_INSTRUCTIONS,
            model=model,
        )
        return parse_analysis(run_agent_sync(agent, build_prompt(snapshot)))
    except Exception as e:
        logger.warning(f"AI analysis for {snapshot.symbol} failed, using fallback: {e}")
        return fallback_analysis(snapshot)
