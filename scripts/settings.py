#!/usr/bin/env python3
"""
User settings.

Shows and updates starting capital and preferences.
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
from cryptojournal.core.errors import JournalError, ValidationError
from cryptojournal.core.utils import configure_logging, format_currency, to_decimal

app = typer.Typer(help="User settings")
console = Console()


@app.command()
def show():
    """
    Show stored settings (defaults for a new user) and the active configuration.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        settings = journal.settings.load_user_settings(journal.owner_id)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Starting Capital", format_currency(settings.starting_capital))
    table.add_row("Notifications", "On" if settings.notifications else "Off")
    table.add_row("Email Updates", "On" if settings.email_updates else "Off")
    table.add_row("Auto Backup", "On" if settings.auto_backup else "Off")
    table.add_row("Theme", settings.theme)
    console.print(table)

    console.print("\n[bold]Configuration[/bold]")
    console.print(config.get_summary())


@app.command("set")
def set_settings(
    capital: str = typer.Option(None, "--capital", "-c", help="Starting capital in USD"),
    notifications: bool = typer.Option(None, "--notifications/--no-notifications"),
    email_updates: bool = typer.Option(None, "--email-updates/--no-email-updates"),
    auto_backup: bool = typer.Option(None, "--auto-backup/--no-auto-backup"),
    theme: str = typer.Option(None, "--theme", help="dark or light"),
):
    """
    Update settings. Options not given keep their current value.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        journal = open_journal(config)
        settings = journal.settings.load_user_settings(journal.owner_id)

        if capital is not None:
            try:
                settings.starting_capital = to_decimal(capital)
            except ValueError:
                raise ValidationError("starting_capital", f"Not a number: {capital!r}")
        if notifications is not None:
            settings.notifications = notifications
        if email_updates is not None:
            settings.email_updates = email_updates
        if auto_backup is not None:
            settings.auto_backup = auto_backup
        if theme:
            settings.theme = theme.lower()

        saved = journal.settings.save_user_settings(settings)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    console.print(f"[green]Settings saved. Starting capital: {format_currency(saved.starting_capital)}[/green]")


if __name__ == "__main__":
    app()
