"""Setup command for the trading journal CLI."""

import click
from rich.panel import Panel

from tradejournal.cli.common import console, get_config, get_store, unwrap


@click.command("init")
@click.option(
    "--write-config",
    is_flag=True,
    default=False,
    help="Also write a template config file if none exists.",
)
@click.pass_context
def init(ctx: click.Context, write_config: bool) -> None:
    """Create the data directory layout.

    Safe to run more than once.

    \b
    Examples:
      tradejournal init
      tradejournal init --write-config
    """
    if write_config:
        from tradejournal.config import CONFIG_PATH, create_template_config

        path = ctx.obj.get("config_path") or CONFIG_PATH
        if path.exists():
            console.print(f"[dim]Config already exists at {path}[/dim]")
        else:
            create_template_config(path)
            console.print(f"[green]✓[/green] Wrote template config to [cyan]{path}[/cyan]")

    config = get_config(ctx)
    unwrap(get_store(ctx).ensure_layout())

    console.print(Panel(
        f"[green]Data directory ready[/green]\n\n"
        f"[bold]Location:[/bold] {config.data_dir}",
        title="[bold]Trading Journal[/bold]",
        border_style="green",
    ))
