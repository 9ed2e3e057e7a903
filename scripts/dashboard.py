#!/usr/bin/env python3
"""
Dashboard.

Capital, PnL and open positions, with an optional SVG capital chart.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import typer
from rich.console import Console
from rich.table import Table

from cryptojournal.app import open_journal, report_error
from cryptojournal.core.config import Config
from cryptojournal.core.errors import JournalError
from cryptojournal.core.utils import configure_logging, format_currency, format_pnl, format_short_date
from cryptojournal.review.chart import map_capital_chart, render_svg
from cryptojournal.review.overview import build_overview

app = typer.Typer(help="Capital dashboard")
console = Console()


@app.command()
def main(
    svg: str = typer.Option(None, "--svg", help="Write the capital chart to this SVG file"),
):
    """
    Show the capital overview.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        trades = journal.trades.list_for_owner(journal.owner_id)
        user_settings = journal.settings.get_user_settings(journal.owner_id)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    overview = build_overview(trades, user_settings)

    table = Table(title="Dashboard", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total Capital", format_currency(overview.total_capital))
    table.add_row("Starting Capital", format_currency(overview.starting_capital))
    table.add_row("Net P/L", f"{format_pnl(overview.net_pnl)} ({overview.net_pnl_percentage:+.2f}%)")
    table.add_row("Total Trades", str(overview.total_trades))
    table.add_row("Open Positions", str(overview.open_positions))
    table.add_row("Win Rate", f"{overview.win_rate:.1f}%")
    console.print(table)

    geometry = map_capital_chart(overview.capital_history, config.chart_width, config.chart_height)

    if not geometry.ok:
        console.print(f"\n[yellow]Capital chart: {geometry.reason}[/yellow]")
    else:
        first = overview.capital_history[0]
        last = overview.capital_history[-1]
        arrow = "[green]▲[/green]" if geometry.trend == "up" else "[red]▼[/red]"
        console.print(
            f"\nCapital growth {arrow} {format_short_date(first.date)}: {format_currency(first.capital)}"
            f" → {format_short_date(last.date)}: {format_currency(last.capital)}"
        )

    if svg:
        output = Path(svg)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(render_svg(geometry))
        console.print(f"[green]Chart written to {output}[/green]")


if __name__ == "__main__":
    app()
