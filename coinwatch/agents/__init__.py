"""AI agents for coinwatch.

- Analyst: short commentary on a coin's 24h market data
"""

from coinwatch.agents.base import (
    create_agent,
    run_agent_sync,
    get_model,
)
from coinwatch.agents.analyst import (
    Analysis,
    analyze_snapshot,
    fallback_analysis,
    parse_analysis,
)

__all__ = [
    # Base utilities
    "create_agent",
    "run_agent_sync",
    "get_model",
    # Analyst
    "Analysis",
    "analyze_snapshot",
    "fallback_analysis",
    "parse_analysis",
]
