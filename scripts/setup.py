#!/usr/bin/env python3
"""
Setup for CryptoJournal.

Prints the database setup SQL, creates the local tables and checks
that every table is reachable with the current configuration.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from cryptojournal.app import report_error
from cryptojournal.core.config import Config
from cryptojournal.core.errors import JournalError
from cryptojournal.core.utils import configure_logging
from cryptojournal.store import ALL_TABLES, build_gateway
from cryptojournal.store.schema import full_setup_sql, setup_sql_for

app = typer.Typer(help="Set up and check the journal database")
console = Console()


@app.command()
def main(
    sql: bool = typer.Option(False, "--sql", help="Print the Supabase setup SQL and exit"),
    table: str = typer.Option(None, "--table", "-t", help="Only print SQL for this table"),
):
    """
    Check the configured store.

    With the sqlite backend the tables are created if missing.
    """
    if sql:
        text = setup_sql_for(table) if table else full_setup_sql()
        console.print(Syntax(text, "sql", word_wrap=True))
        return

    config = Config.from_env()
    configure_logging(config.log_level)

    console.print(Panel.fit(
        "[bold cyan]CryptoJournal Setup[/bold cyan]\n\n" + config.get_summary(),
        border_style="cyan",
    ))

    try:
        gateway = build_gateway(config)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    failed = 0
    for name in ALL_TABLES:
        console.print(f"{name}:", end=" ")
        try:
            gateway.ping(name)
            console.print("[green]✓ OK[/green]")
        except JournalError as e:
            failed += 1
            console.print(f"[red]✗ {e}[/red]")

    if failed:
        console.print(
            f"\n[yellow]{failed} table(s) unavailable.[/yellow] "
            "Run [dim]python scripts/setup.py --sql[/dim] and paste the output "
            "into the Supabase SQL editor."
        )
        raise typer.Exit(1)

    console.print("\n[bold green]Setup complete.[/bold green]")
    if not config.user_id:
        console.print("[yellow]JOURNAL_USER_ID is empty: nothing will be saved until it is set.[/yellow]")


if __name__ == "__main__":
    app()
