"""CLI commands for the trading journal.

This package provides the command-line interface: data directory
setup, trade and thesis journaling, screenshots and backups.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
