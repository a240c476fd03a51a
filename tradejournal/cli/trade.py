"""Trade commands for the trading journal CLI.

Handles creating, viewing, listing and deleting journaled trades.
"""

import json
from datetime import datetime
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import (
    console,
    get_screenshot_store,
    get_store,
    read_json_input,
    unwrap,
)
from tradejournal.models import Trade, format_timestamp, new_id, utc_now


def build_trade_payload(
    ticker: str,
    trade_type: str,
    thesis: str,
    risk: str,
    entry_date: Optional[datetime] = None,
    entry_price: Optional[float] = None,
    quantity: Optional[float] = None,
    target_price: Optional[float] = None,
    stop_loss: Optional[float] = None,
    linked_thesis_id: Optional[str] = None,
    tags: tuple[str, ...] = (),
) -> dict:
    """Build the JSON form of a new trade from command-line values.

    The result is validated by the store when saved.
    """
    now = format_timestamp(utc_now())
    pre_trade_notes = {"thesis": thesis, "riskAssessment": risk}
    if target_price is not None:
        pre_trade_notes["targetPrice"] = target_price
    if stop_loss is not None:
        pre_trade_notes["stopLoss"] = stop_loss

    payload = {
        "id": new_id(),
        "ticker": ticker.upper(),
        "entryDate": format_timestamp(entry_date) if entry_date else now,
        "type": trade_type,
        "status": "open",
        "preTradeNotes": pre_trade_notes,
        "duringTradeNotes": [],
        "screenshots": [],
        "tags": list(tags),
        "createdAt": now,
        "updatedAt": now,
    }
    if entry_price is not None:
        payload["entryPrice"] = entry_price
    if quantity is not None:
        payload["quantity"] = quantity
    if linked_thesis_id:
        payload["linkedThesisId"] = linked_thesis_id
    return payload


@click.group("trade")
def trade() -> None:
    """Journal trades.

    \b
    Examples:
      tradejournal trade new AAPL long --thesis "..." --risk "..."
      tradejournal trade list
      tradejournal trade show <ID>
    """


@trade.command("new")
@click.argument("ticker")
@click.argument("trade_type", type=click.Choice(["long", "short"]))
@click.option("--thesis", required=True, help="Why you are taking the trade (10+ chars).")
@click.option("--risk", required=True, help="Risk assessment (10+ chars).")
@click.option("--entry-date", type=click.DateTime(), default=None, help="Entry time (UTC). Default: now.")
@click.option("--entry-price", type=float, default=None, help="Entry price.")
@click.option("--quantity", type=float, default=None, help="Quantity.")
@click.option("--target", "target_price", type=float, default=None, help="Target price.")
@click.option("--stop", "stop_loss", type=float, default=None, help="Stop loss price.")
@click.option("--thesis-id", default=None, help="Link to a quarterly thesis.")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.pass_context
def new_trade(
    ctx: click.Context,
    ticker: str,
    trade_type: str,
    thesis: str,
    risk: str,
    entry_date: Optional[datetime],
    entry_price: Optional[float],
    quantity: Optional[float],
    target_price: Optional[float],
    stop_loss: Optional[float],
    thesis_id: Optional[str],
    tags: tuple[str, ...],
) -> None:
    """Journal a new trade.

    TICKER is the symbol (e.g., AAPL). TRADE_TYPE is long or short.
    """
    payload = build_trade_payload(
        ticker,
        trade_type,
        thesis,
        risk,
        entry_date=entry_date,
        entry_price=entry_price,
        quantity=quantity,
        target_price=target_price,
        stop_loss=stop_loss,
        linked_thesis_id=thesis_id,
        tags=tags,
    )
    trade_id = unwrap(get_store(ctx).save_trade(payload))
    console.print(f"[green]✓[/green] Saved trade [bold]{payload['ticker']}[/bold] ({trade_id})")


@trade.command("save")
@click.argument("source", default="-")
@click.pass_context
def save_trade(ctx: click.Context, source: str) -> None:
    """Save a trade from a JSON file (or - for stdin).

    An existing trade with the same ID is overwritten.
    """
    trade_id = unwrap(get_store(ctx).save_trade(read_json_input(source)))
    console.print(f"[green]✓[/green] Saved trade {trade_id}")


@trade.command("show")
@click.argument("trade_id")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw JSON.")
@click.pass_context
def show_trade(ctx: click.Context, trade_id: str, as_json: bool) -> None:
    """Show a trade."""
    loaded: Trade = unwrap(get_store(ctx).load_trade(trade_id))

    if as_json:
        click.echo(json.dumps(loaded.to_json_dict(), indent=2, ensure_ascii=False))
        return

    pre = loaded.pre_trade_notes
    lines = [
        f"[bold]Type:[/bold] {loaded.trade_type}    [bold]Status:[/bold] {loaded.status}",
        f"[bold]Entry:[/bold] {format_timestamp(loaded.entry_date)}"
        + (f" @ {loaded.entry_price}" if loaded.entry_price else ""),
    ]
    if loaded.exit_date:
        lines.append(
            f"[bold]Exit:[/bold] {format_timestamp(loaded.exit_date)}"
            + (f" @ {loaded.exit_price}" if loaded.exit_price else "")
        )
    lines += ["", f"[bold]Thesis:[/bold] {pre.thesis}", f"[bold]Risk:[/bold] {pre.risk_assessment}"]

    for note in loaded.during_trade_notes:
        lines.append(f"[dim]{format_timestamp(note.timestamp)}[/dim] {note.content}")

    post = loaded.post_trade_notes
    if post:
        color = {"win": "green", "loss": "red"}.get(post.outcome, "yellow")
        lines += [
            "",
            f"[bold]Outcome:[/bold] [{color}]{post.outcome}[/{color}]",
            f"[bold]Exit reason:[/bold] {post.exit_reason}",
            f"[bold]Lessons:[/bold] {post.lessons_learned}",
        ]
    if loaded.tags:
        lines.append(f"\n[bold]Tags:[/bold] {', '.join(loaded.tags)}")

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold cyan]{loaded.ticker}[/bold cyan] [dim]{loaded.id}[/dim]",
        border_style="cyan",
    ))


@trade.command("list")
@click.pass_context
def list_trades(ctx: click.Context) -> None:
    """List trades, newest first."""
    summaries = unwrap(get_store(ctx).list_trades())

    if not summaries:
        console.print(Panel(
            "[dim]No trades journaled yet[/dim]",
            title="[bold]Trades[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Trades", show_header=True, header_style="bold cyan")
    table.add_column("Ticker", style="bold")
    table.add_column("Type")
    table.add_column("Entry")
    table.add_column("Status")
    table.add_column("Outcome")
    table.add_column("P&L", justify="right")
    table.add_column("ID", style="dim")

    for summary in summaries:
        pnl = "-"
        if summary.profit_loss is not None:
            color = "green" if summary.profit_loss >= 0 else "red"
            sign = "+" if summary.profit_loss >= 0 else ""
            pnl = f"[{color}]{sign}{summary.profit_loss:.2f}[/{color}]"
        table.add_row(
            summary.ticker,
            summary.trade_type,
            summary.entry_date.strftime("%Y-%m-%d"),
            summary.status,
            summary.outcome or "-",
            pnl,
            summary.id,
        )

    console.print(table)


@trade.command("delete")
@click.argument("trade_id")
@click.option(
    "--with-screenshots",
    is_flag=True,
    default=False,
    help="Also delete the screenshot files the trade references.",
)
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def delete_trade(ctx: click.Context, trade_id: str, with_screenshots: bool, yes: bool) -> None:
    """Delete a trade.

    Screenshots are kept unless --with-screenshots is given.
    """
    store = get_store(ctx)
    screenshots: list[str] = []
    if with_screenshots:
        screenshots = unwrap(store.load_trade(trade_id)).screenshots

    if not yes:
        click.confirm(f"Delete trade {trade_id}?", abort=True)

    unwrap(store.delete_trade(trade_id))
    console.print(f"[green]✓[/green] Deleted trade {trade_id}")

    if screenshots:
        screenshot_store = get_screenshot_store(ctx)
        for path in screenshots:
            response = screenshot_store.delete_screenshot(path)
            if response.success:
                console.print(f"[green]✓[/green] Deleted screenshot {path}")
            else:
                console.print(f"[yellow]![/yellow] {response.error}")
