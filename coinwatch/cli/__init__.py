"""CLI commands for coinwatch.

This package provides the command-line interface for coinwatch,
including market data, AI commentary, alerts, monitoring and portfolio
commands.
"""

from coinwatch.cli.main import cli, main

__all__ = ["cli", "main"]
