"""Backup commands for the trading journal CLI.

Create, list, validate, restore and delete snapshots of the data
directory.
"""

import click
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from tradejournal.cli.common import console, fail, format_bytes, get_backup_engine, unwrap
from tradejournal.models import BackupProgress


def _progress_bar() -> Progress:
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    )


def _progress_sink(progress: Progress, task_id):
    def sink(event: BackupProgress) -> None:
        progress.update(task_id, completed=event.percentage, description=event.phase)

    return sink


@click.group("backup")
def backup() -> None:
    """Snapshot and restore the data directory.

    \b
    Examples:
      tradejournal backup create
      tradejournal backup list
      tradejournal backup restore backup_2025-01-24T10-30-00-000Z
    """


@backup.command("create")
@click.pass_context
def create_backup(ctx: click.Context) -> None:
    """Create a compressed snapshot of all journal data."""
    engine = get_backup_engine(ctx)
    with _progress_bar() as progress:
        task_id = progress.add_task("scanning", total=100)
        response = engine.create_backup(_progress_sink(progress, task_id))

    created = unwrap(response)
    metadata = created.metadata
    console.print(Panel(
        f"[green]Backup created[/green]\n\n"
        f"[bold]ID:[/bold] {metadata.id}\n"
        f"[bold]Files:[/bold] {metadata.file_count}\n"
        f"[bold]Size:[/bold] {format_bytes(metadata.size)}\n"
        f"[bold]Path:[/bold] {created.backup_path}",
        title="[bold]Backup[/bold]",
        border_style="green",
    ))


@backup.command("list")
@click.pass_context
def list_backups(ctx: click.Context) -> None:
    """List backups, newest first."""
    backups = unwrap(get_backup_engine(ctx).list_backups())

    if not backups:
        console.print(Panel(
            "[dim]No backups found[/dim]",
            title="[bold]Backups[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Backups", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Created")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")

    for metadata in backups:
        table.add_row(
            metadata.id,
            metadata.timestamp,
            str(metadata.file_count),
            format_bytes(metadata.size),
        )

    console.print(table)


@backup.command("validate")
@click.argument("backup_id")
@click.pass_context
def validate_backup(ctx: click.Context, backup_id: str) -> None:
    """Check that a backup is complete and unmodified."""
    result = unwrap(get_backup_engine(ctx).validate_backup(backup_id))
    if result.is_valid:
        console.print(f"[green]✓[/green] {backup_id} is valid")
        return

    console.print(Panel(
        "\n".join(f"[red]• {error}[/red]" for error in result.errors),
        title=f"[bold red]{backup_id} is invalid[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


@backup.command("restore")
@click.argument("backup_id")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def restore_backup(ctx: click.Context, backup_id: str, yes: bool) -> None:
    """Replace the current data with a backup.

    The current data is moved into backups/pre_restore_<ms> first and is
    not deleted. If the restore fails partway, recover by hand from that
    directory.
    """
    if not yes:
        click.confirm(
            f"Restore {backup_id}? Current data will be moved aside.", abort=True
        )

    engine = get_backup_engine(ctx)
    with _progress_bar() as progress:
        task_id = progress.add_task("validating", total=100)
        response = engine.restore_backup(backup_id, _progress_sink(progress, task_id))

    if not response.success:
        report = response.data
        if report is not None and report.pre_restore_path:
            console.print(
                f"[yellow]Previous data is in[/yellow] [cyan]{report.pre_restore_path}[/cyan]"
            )
        fail(response)

    report = response.data
    console.print(Panel(
        f"[green]Restored {backup_id}[/green]\n\n"
        f"[bold]Restored entries:[/bold] {', '.join(report.restored) or '-'}\n"
        f"[bold]Previous data:[/bold] {report.pre_restore_path}",
        title="[bold]Restore[/bold]",
        border_style="green",
    ))


@backup.command("delete")
@click.argument("backup_id")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def delete_backup(ctx: click.Context, backup_id: str, yes: bool) -> None:
    """Delete a backup archive and its metadata."""
    if not yes:
        click.confirm(f"Delete backup {backup_id}?", abort=True)
    unwrap(get_backup_engine(ctx).delete_backup(backup_id))
    console.print(f"[green]✓[/green] Deleted backup {backup_id}")


@backup.command("size")
@click.pass_context
def backups_size(ctx: click.Context) -> None:
    """Show the total size of all backups."""
    totals = unwrap(get_backup_engine(ctx).get_backups_size())
    console.print(
        f"[bold]{totals.backup_count}[/bold] backup(s), "
        f"[bold]{format_bytes(totals.total_size)}[/bold] total"
    )
