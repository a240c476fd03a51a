"""Screenshot commands for the trading journal CLI."""

from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, format_bytes, get_screenshot_store, get_store, unwrap
from tradejournal.models import utc_now


@click.group("screenshot")
def screenshot() -> None:
    """Store chart screenshots alongside trades.

    \b
    Examples:
      tradejournal screenshot add chart.png --trade <ID>
      tradejournal screenshot list
    """


@screenshot.command("add")
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--trade", "trade_id", default=None, help="Attach to this trade.")
@click.pass_context
def add_screenshot(ctx: click.Context, image: Path, trade_id: Optional[str]) -> None:
    """Store IMAGE, optionally attaching it to a trade."""
    store = get_store(ctx)
    trade = unwrap(store.load_trade(trade_id)) if trade_id else None

    saved = unwrap(get_screenshot_store(ctx).save_screenshot(
        image.name, image.read_bytes(), trade_id=trade_id
    ))
    console.print(f"[green]✓[/green] Stored screenshot [cyan]{saved['path']}[/cyan]")

    if trade is not None:
        updated = trade.model_copy(update={
            "screenshots": [*trade.screenshots, saved["path"]],
            "updated_at": utc_now(),
        })
        unwrap(store.save_trade(updated))
        console.print(f"[green]✓[/green] Attached to trade {trade_id}")


@screenshot.command("list")
@click.pass_context
def list_screenshots(ctx: click.Context) -> None:
    """List stored screenshots, newest first."""
    screenshots = unwrap(get_screenshot_store(ctx).list_screenshots())

    if not screenshots:
        console.print(Panel(
            "[dim]No screenshots stored[/dim]",
            title="[bold]Screenshots[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Screenshots", show_header=True, header_style="bold cyan")
    table.add_column("Path", style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Stored")

    for info in screenshots:
        table.add_row(info.path, format_bytes(info.size), info.created.strftime("%Y-%m-%d %H:%M"))

    console.print(table)


@screenshot.command("delete")
@click.argument("path")
@click.pass_context
def delete_screenshot(ctx: click.Context, path: str) -> None:
    """Delete a stored screenshot.

    Trades that reference it are not updated.
    """
    unwrap(get_screenshot_store(ctx).delete_screenshot(path))
    console.print(f"[green]✓[/green] Deleted screenshot {path}")
