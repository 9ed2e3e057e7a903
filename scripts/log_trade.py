#!/usr/bin/env python3
"""
Log a trade.

Records a new position, or closes an open one at a price.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from typing import List

import typer
from rich.console import Console
from rich.prompt import Prompt

from cryptojournal.app import open_journal, report_error
from cryptojournal.core.config import Config
from cryptojournal.core.errors import JournalError
from cryptojournal.core.utils import configure_logging, format_pnl, utcnow
from cryptojournal.journal.form import TradeDraft, build_trade, close_trade

app = typer.Typer(help="Log a trade")
console = Console()


@app.command()
def main(
    asset: str = typer.Option(None, "--asset", "-a", help="Asset symbol (e.g., BTC/USDT)"),
    direction: str = typer.Option("LONG", "--type", "-t", help="LONG or SHORT"),
    entry: str = typer.Option(None, "--entry", "-e", help="Entry price"),
    quantity: str = typer.Option(None, "--qty", "-q", help="Quantity"),
    leverage: str = typer.Option("10", "--leverage", "-l", help="Leverage"),
    exit_price: str = typer.Option(None, "--exit", "-x", help="Exit price"),
    pnl: str = typer.Option(None, "--pnl", help="PnL, when no exit price is given"),
    opened: str = typer.Option(None, "--opened", help="Open time (ISO 8601, default now)"),
    closed: str = typer.Option(None, "--closed", help="Close time (ISO 8601)"),
    notes: str = typer.Option("", "--notes", "-n", help="Trade notes"),
    tag: List[str] = typer.Option([], "--tag", help="Tag (repeatable)"),
):
    """
    Log a new trade.

    Prompts for any required field not given as an option.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    console.print("\n[bold]Log Trade[/bold]\n")

    if not asset:
        asset = Prompt.ask("Asset", console=console)
    if not entry:
        entry = Prompt.ask("Entry price", console=console)
    if not quantity:
        quantity = Prompt.ask("Quantity", console=console)
    if not opened:
        opened = utcnow().isoformat()

    draft = TradeDraft(
        asset=asset,
        direction=direction,
        leverage=leverage,
        quantity=quantity,
        open_price=entry,
        close_price=exit_price,
        pnl=pnl,
        open_time=opened,
        close_time=closed,
        notes=notes,
        tags=tag,
    )

    try:
        journal = open_journal(config)
        trade = journal.trades.create(build_trade(draft, journal.owner_id))
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    console.print(
        f"\n[green]Trade {trade.id} logged: {trade.direction.value} {trade.asset} "
        f"x{trade.leverage} ({format_pnl(trade.pnl)})[/green]\n"
    )


@app.command()
def close(
    trade_id: str = typer.Argument(..., help="Trade ID"),
    price: str = typer.Option(..., "--price", "-p", help="Exit price"),
    at: str = typer.Option(None, "--at", help="Close time (ISO 8601, default now)"),
):
    """
    Close an open trade at an exit price.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        trade = journal.trades.get(trade_id)

        if not trade:
            console.print(f"[red]Trade {trade_id} not found.[/red]")
            raise typer.Exit(1)

        if not trade.is_open:
            console.print(f"[yellow]Trade {trade_id} already closed at {trade.close_price}[/yellow]")
            raise typer.Exit(1)

        changes = close_trade(trade, price, at=at)
        updated = journal.trades.update(trade_id, **changes)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    console.print(
        f"\n[green]Trade {trade_id} closed at {updated.close_price} ({format_pnl(updated.pnl)})[/green]\n"
    )


if __name__ == "__main__":
    app()
