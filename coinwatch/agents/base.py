"""Thin wrappers around the OpenAI Agents SDK.

coinwatch only needs single-turn agents: build one with fixed
instructions, send it one message, read back the final text.
"""

import os
from typing import Any, Optional

# SDK telemetry is not wanted for a CLI tool
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")

from agents import Agent, Runner, set_default_openai_key


DEFAULT_MODEL = "gpt-4o"


def get_model() -> str:
    """Model name from ``OPENAI_MODEL``, else ``DEFAULT_MODEL``."""
    return os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)


def configure_api_key(api_key: Optional[str]) -> None:
    """Use ``api_key`` for subsequent agent runs when one is given."""
    if api_key:
        set_default_openai_key(api_key)


def create_agent(
    name: str,
    instructions: str,
    model: Optional[str] = None,
) -> Agent:
    """Build a tool-less agent.

    Args:
        name: Agent name, shown in the run log line.
        instructions: System prompt.
        model: Model override; ``get_model()`` when not given.

    Returns:
        The agent.
    """
    return Agent(
        name=name,
        instructions=instructions,
        model=model or get_model(),
    )


def run_agent_sync(
    agent: Agent,
    message: str,
    context: Optional[dict[str, Any]] = None,
) -> str:
    """Run ``agent`` on ``message`` and return its final output.

    A one-line notice naming the agent and model goes to stderr, so the
    command's own output stays clean.
    """
    from rich.console import Console

    Console(stderr=True).print(f"[dim]🤖 {agent.name} ({agent.model})[/dim]")
    result = Runner.run_sync(agent, message, context=context)
    return str(result.final_output)
