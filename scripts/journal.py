#!/usr/bin/env python3
"""
Trade journal.

Lists, deletes and exports logged trades.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from typing import List

import typer
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from cryptojournal.app import open_journal, report_error
from cryptojournal.core.config import Config
from cryptojournal.core.entities import TradeStatus
from cryptojournal.core.errors import JournalError, ValidationError
from cryptojournal.core.utils import configure_logging, format_datetime, format_pnl, utcnow
from cryptojournal.journal.browse import JournalQuery, browse, export_csv, export_json
from cryptojournal.journal.form import parse_direction

app = typer.Typer(help="Browse and manage the trade journal")
console = Console()


@app.command("list")
def list_trades(
    search: str = typer.Option("", "--search", "-s", help="Match asset or notes"),
    asset: List[str] = typer.Option([], "--asset", "-a", help="Asset filter (repeatable)"),
    direction: List[str] = typer.Option([], "--type", "-t", help="LONG or SHORT (repeatable)"),
    status: str = typer.Option(None, "--status", help="OPEN or CLOSED"),
    tag: List[str] = typer.Option([], "--tag", help="Tag filter (repeatable)"),
    sort_by: str = typer.Option("open_time", "--sort", help="open_time, close_time, pnl or asset"),
    ascending: bool = typer.Option(False, "--asc", help="Oldest / smallest first"),
):
    """
    Show trades matching the filters.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        query = JournalQuery(
            search=search,
            assets=asset,
            directions=[parse_direction(d) for d in direction],
            status=_parse_status(status),
            tags=tag,
            sort_by=sort_by,
            descending=not ascending,
        )
        journal = open_journal(config)
        trades = browse(journal.trades.list_for_owner(journal.owner_id), query)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    if not trades:
        console.print("[yellow]No trades found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Asset", style="cyan")
    table.add_column("Type")
    table.add_column("Lev", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("PnL", justify="right")
    table.add_column("Opened")
    table.add_column("Status")

    for trade in trades:
        pnl_style = "green" if trade.pnl > 0 else "red" if trade.pnl < 0 else "white"
        table.add_row(
            trade.id,
            trade.asset,
            trade.direction.value,
            f"{trade.leverage}x",
            str(trade.quantity),
            str(trade.open_price),
            str(trade.close_price) if trade.close_price is not None else "-",
            f"[{pnl_style}]{format_pnl(trade.pnl)}[/{pnl_style}]",
            format_datetime(trade.open_time),
            trade.status.value,
        )

    console.print(table)
    console.print(f"[dim]{len(trades)} trade(s)[/dim]")


@app.command()
def delete(
    trade_id: str = typer.Argument(..., help="Trade ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """
    Delete one trade.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    if not yes and not Confirm.ask(f"Delete trade {trade_id}?", console=console):
        raise typer.Exit(0)

    try:
        deleted = open_journal(config).trades.delete(trade_id)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    if not deleted:
        console.print(f"[red]Trade {trade_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Trade {trade_id} deleted.[/green]")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """
    Delete every trade in the journal. Starting capital is kept.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    if not yes and not Confirm.ask(
        "Clear ALL trades? This cannot be undone.", console=console, default=False
    ):
        raise typer.Exit(0)

    try:
        journal = open_journal(config)
        count = journal.trades.clear_all(journal.owner_id)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    console.print(f"[green]Deleted {count} trade(s).[/green]")


@app.command()
def export(
    output: str = typer.Option(None, "--output", "-o", help="Output file path"),
    fmt: str = typer.Option("csv", "--format", "-f", help="csv or json"),
):
    """
    Export all trades to CSV or JSON.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    fmt = fmt.lower()
    if fmt not in ("csv", "json"):
        console.print(f"[red]Unknown format: {fmt}[/red]")
        raise typer.Exit(1)

    if not output:
        output = f"data/trades_export_{utcnow().strftime('%Y%m%d_%H%M%S')}.{fmt}"

    try:
        journal = open_journal(config)
        trades = browse(journal.trades.list_for_owner(journal.owner_id), JournalQuery(descending=False))
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    count = export_csv(trades, output) if fmt == "csv" else export_json(trades, output)
    console.print(f"[green]Exported {count} trades to {output}[/green]")


def _parse_status(value):
    if not value:
        return None
    try:
        return TradeStatus(value.strip().upper())
    except ValueError:
        raise ValidationError("status", f"Invalid status: {value}")


if __name__ == "__main__":
    app()
