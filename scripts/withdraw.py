#!/usr/bin/env python3
"""
Smart withdrawal.

Shows how much profit can be taken out, records withdrawals and
reverts them. Reverting appends an offsetting entry; the ledger keeps
its full history.
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
from cryptojournal.core.entities import SmartWithdrawalSettings, WithdrawalAction
from cryptojournal.core.errors import JournalError, ValidationError
from cryptojournal.core.utils import configure_logging, format_currency, format_datetime, to_decimal

app = typer.Typer(help="Smart withdrawal")
console = Console()


@app.command()
def status():
    """
    Show the withdrawal rule and what is available now.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        current = journal.withdrawals.status(journal.owner_id, journal.total_profit())
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    table = Table(title="Smart Withdrawal", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Enabled", "[green]Yes[/green]" if current.settings.enabled else "[yellow]No[/yellow]")
    table.add_row("Reinvest", f"{current.settings.reinvest_percentage}%")
    table.add_row("Total Profit", format_currency(current.total_profit))
    table.add_row("Reinvested", format_currency(current.reinvested))
    table.add_row("Withdrawable Share", format_currency(current.protected))
    table.add_row("Already Withdrawn", format_currency(current.net_withdrawn))
    table.add_row("Available", f"[bold green]{format_currency(current.available)}[/bold green]")
    console.print(table)


@app.command()
def request(
    amount: str = typer.Argument(..., help="Amount in USD"),
):
    """
    Withdraw an amount, if the rule allows it.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        entry = journal.withdrawals.request_withdrawal(journal.owner_id, amount, journal.total_profit())
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    console.print(f"[green]{entry.description} recorded ({entry.id}).[/green]")


@app.command()
def revert(
    transaction_id: str = typer.Argument(..., help="Withdrawal transaction ID"),
):
    """
    Revert a withdrawal, making its amount available again.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        entry = journal.withdrawals.revert_withdrawal(journal.owner_id, transaction_id)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    console.print(f"[green]Reverted {format_currency(entry.amount)} ({entry.id}).[/green]")


@app.command()
def history():
    """
    Show the withdrawal ledger, newest first.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        entries = journal.ledger.list_for_owner(journal.owner_id)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    if not entries:
        console.print("[yellow]No withdrawals yet.[/yellow]")
        return

    reverted = {e.reverted_id for e in entries if e.reverted_id}

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("When")
    table.add_column("Action")
    table.add_column("Amount", justify="right")
    table.add_column("Description")

    for entry in entries:
        if entry.action == WithdrawalAction.REVERT:
            action = "[yellow]REVERT[/yellow]"
        elif entry.id in reverted:
            action = "[dim]WITHDRAW (reverted)[/dim]"
        else:
            action = "[green]WITHDRAW[/green]"
        table.add_row(
            entry.id,
            format_datetime(entry.timestamp),
            action,
            format_currency(entry.amount),
            entry.description,
        )

    console.print(table)


@app.command()
def configure(
    enable: bool = typer.Option(None, "--enable/--disable", help="Turn the rule on or off"),
    reinvest: str = typer.Option(None, "--reinvest", "-r", help="Percent of profit to reinvest (0-100)"),
):
    """
    Change the withdrawal rule.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        current = journal.settings.load_withdrawal_settings(journal.owner_id)

        reinvest_value = current.reinvest_percentage
        if reinvest is not None:
            try:
                reinvest_value = to_decimal(reinvest)
            except ValueError:
                raise ValidationError("reinvest_percentage", f"Not a number: {reinvest!r}")

        saved = journal.settings.save_withdrawal_settings(
            SmartWithdrawalSettings(
                owner_id=journal.owner_id,
                enabled=current.enabled if enable is None else enable,
                reinvest_percentage=reinvest_value,
            )
        )
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    state = "enabled" if saved.enabled else "disabled"
    console.print(f"[green]Smart withdrawal {state}, reinvesting {saved.reinvest_percentage}%.[/green]")


if __name__ == "__main__":
    app()
