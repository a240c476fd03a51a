"""Thesis commands for the trading journal CLI.

Quarterly theses are written as JSON documents and saved with
``thesis save``; the other commands read them back.
"""

import json

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, get_store, read_json_input, unwrap
from tradejournal.models import Thesis
from tradejournal.models.thesis import QUARTERS

OUTLOOK_COLORS = {"bullish": "green", "bearish": "red", "neutral": "yellow"}


def _print_thesis(thesis: Thesis) -> None:
    color = OUTLOOK_COLORS[thesis.market_outlook]
    risk = thesis.risk_parameters
    goals = thesis.goals
    lines = [
        f"[bold]Outlook:[/bold] [{color}]{thesis.market_outlook}[/{color}]"
        f"    [bold]Active:[/bold] {'yes' if thesis.is_active else 'no'}",
        "",
        f"[bold]Focus:[/bold] {', '.join(thesis.strategies.focus)}",
    ]
    if thesis.strategies.avoid:
        lines.append(f"[bold]Avoid:[/bold] {', '.join(thesis.strategies.avoid)}")
    if thesis.strategies.themes:
        lines.append(f"[bold]Themes:[/bold] {', '.join(thesis.strategies.themes)}")
    lines += [
        "",
        f"[bold]Max position:[/bold] {risk.max_position_size:.0%}",
        f"[bold]Stop loss rules:[/bold] {risk.stop_loss_rules}",
        f"[bold]Diversification:[/bold] {risk.diversification_rules}",
        "",
        f"[bold]Profit target:[/bold] {goals.profit_target:g}"
        f"    [bold]Trades:[/bold] {goals.trade_count:g}",
    ]
    lines += [f"  • {objective}" for objective in goals.learning_objectives]
    if thesis.versions:
        lines.append(f"\n[dim]{len(thesis.versions)} revision(s)[/dim]")

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold cyan]{thesis.year} {thesis.quarter}: {thesis.title}[/bold cyan]",
        subtitle=f"[dim]{thesis.id}[/dim]",
        border_style="cyan",
    ))


@click.group("thesis")
def thesis() -> None:
    """Manage quarterly theses.

    \b
    Examples:
      tradejournal thesis save q1-2025.json
      tradejournal thesis active 2025 Q1
    """


@thesis.command("save")
@click.argument("source", default="-")
@click.pass_context
def save_thesis(ctx: click.Context, source: str) -> None:
    """Save a thesis from a JSON file (or - for stdin)."""
    thesis_id = unwrap(get_store(ctx).save_thesis(read_json_input(source)))
    console.print(f"[green]✓[/green] Saved thesis {thesis_id}")


@thesis.command("show")
@click.argument("thesis_id")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw JSON.")
@click.pass_context
def show_thesis(ctx: click.Context, thesis_id: str, as_json: bool) -> None:
    """Show a thesis."""
    loaded: Thesis = unwrap(get_store(ctx).load_thesis(thesis_id))
    if as_json:
        click.echo(json.dumps(loaded.to_json_dict(), indent=2, ensure_ascii=False))
        return
    _print_thesis(loaded)


@thesis.command("list")
@click.pass_context
def list_theses(ctx: click.Context) -> None:
    """List theses, newest first."""
    summaries = unwrap(get_store(ctx).list_theses())

    if not summaries:
        console.print(Panel(
            "[dim]No theses written yet[/dim]",
            title="[bold]Theses[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Theses", show_header=True, header_style="bold cyan")
    table.add_column("Quarter", style="bold")
    table.add_column("Title")
    table.add_column("Outlook")
    table.add_column("Active")
    table.add_column("Trades", justify="right")
    table.add_column("ID", style="dim")

    for summary in summaries:
        color = OUTLOOK_COLORS[summary.market_outlook]
        table.add_row(
            f"{summary.year} {summary.quarter}",
            summary.title,
            f"[{color}]{summary.market_outlook}[/{color}]",
            "✓" if summary.is_active else "",
            str(summary.trade_count),
            summary.id,
        )

    console.print(table)


@thesis.command("delete")
@click.argument("thesis_id")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def delete_thesis(ctx: click.Context, thesis_id: str, yes: bool) -> None:
    """Delete a thesis. Linked trades keep their reference."""
    if not yes:
        click.confirm(f"Delete thesis {thesis_id}?", abort=True)
    unwrap(get_store(ctx).delete_thesis(thesis_id))
    console.print(f"[green]✓[/green] Deleted thesis {thesis_id}")


@thesis.command("active")
@click.argument("year", type=int)
@click.argument("quarter", type=click.Choice(QUARTERS, case_sensitive=False))
@click.pass_context
def active_thesis(ctx: click.Context, year: int, quarter: str) -> None:
    """Show the active thesis for YEAR and QUARTER."""
    quarter = quarter.upper()
    found = unwrap(get_store(ctx).get_active_thesis(year, quarter))
    if found is None:
        console.print(f"[dim]No active thesis for {year} {quarter}[/dim]")
        return
    _print_thesis(found)
