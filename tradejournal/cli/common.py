"""Shared helpers for CLI commands."""

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.panel import Panel

from tradejournal.config import JournalConfig, load_config
from tradejournal.errors import ConfigError
from tradejournal.models import ApiResponse

console = Console()


def get_config(ctx: click.Context) -> JournalConfig:
    """Load configuration once per invocation and set up logging."""
    obj = ctx.ensure_object(dict)
    if "config" in obj:
        return obj["config"]

    from tradejournal.cli.main import configure_logging

    try:
        config = load_config(obj.get("config_path"))
    except ConfigError as e:
        console.print(Panel(
            f"[red]{e}[/red]\n\n"
            "Run [cyan]tradejournal init --write-config[/cyan] to create a config file.",
            title="[bold red]Configuration Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    configure_logging("DEBUG" if obj.get("verbose") else config.log_level)
    obj["config"] = config
    return config


def get_store(ctx: click.Context):
    """Get the document store."""
    from tradejournal.db.store import DocumentStore

    return DocumentStore(get_config(ctx))


def get_backup_engine(ctx: click.Context):
    """Get the backup engine."""
    from tradejournal.db.backup import BackupEngine

    return BackupEngine(get_config(ctx))


def get_screenshot_store(ctx: click.Context):
    """Get the screenshot store."""
    from tradejournal.db.screenshots import ScreenshotStore

    return ScreenshotStore(get_config(ctx))


def fail(response: ApiResponse) -> NoReturn:
    """Print a failed response and exit with status 1."""
    console.print(Panel(
        f"[red]{response.error}[/red]",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def unwrap(response: ApiResponse) -> Any:
    """Return the response data, or print the error and exit."""
    if not response.success:
        fail(response)
    return response.data


def read_json_input(source: str) -> Any:
    """Read a JSON document from a file path or ``-`` for stdin."""
    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).read_text(encoding="utf-8")
        return json.loads(text)
    except (OSError, json.JSONDecodeError) as e:
        console.print(Panel(
            f"[red]Could not read JSON from {source}: {e}[/red]",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)


def format_bytes(size: int) -> str:
    """Human-readable byte count."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"
