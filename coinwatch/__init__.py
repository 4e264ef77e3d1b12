"""coinwatch - crypto price alerts, portfolio tracking and AI commentary."""

__version__ = "0.1.0"
