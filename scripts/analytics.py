#!/usr/bin/env python3
"""
Trading analytics.

Performance, risk and asset statistics for a time window.
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
from cryptojournal.core.utils import configure_logging, format_currency, format_pnl
from cryptojournal.review.analytics import Timeframe, compute_analytics, filter_by_timeframe

app = typer.Typer(help="Trading analytics")
console = Console()


@app.command()
def main(
    timeframe: str = typer.Option(None, "--timeframe", "-t", help="1W, 1M, 3M, 6M, 1Y or ALL"),
):
    """
    Show analytics for trades opened in the timeframe.
    """
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        window = Timeframe.parse(timeframe or config.default_timeframe)
        journal = open_journal(config)
        trades = filter_by_timeframe(journal.trades.list_for_owner(journal.owner_id), window)
    except JournalError as e:
        report_error(console, e)
        raise typer.Exit(1)

    stats = compute_analytics(trades)

    console.print(f"\n[bold cyan]Analytics ({window.value})[/bold cyan]\n")

    table = Table(title="Performance", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total PnL", format_pnl(stats.total_pnl))
    table.add_row("Win Rate", f"{stats.win_rate:.2f}%")
    table.add_row("Total Trades", str(stats.total_trades))
    table.add_row("Winning / Losing", f"{stats.winning_trades} / {stats.losing_trades}")
    table.add_row("Average Win", format_currency(stats.average_win))
    table.add_row("Average Loss", format_currency(stats.average_loss))
    console.print(table)

    table = Table(title="Risk", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Sharpe Ratio", f"{stats.sharpe_ratio:.2f}")
    table.add_row("Max Drawdown", f"{stats.max_drawdown:.2f}%")
    table.add_row("Volatility", format_currency(stats.volatility))
    console.print(table)

    table = Table(title="Frequency", show_header=False)
    table.add_column("Window", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_row("Last 24h", str(stats.daily_trades))
    table.add_row("Last 7 days", str(stats.weekly_trades))
    table.add_row("Last 30 days", str(stats.monthly_trades))
    console.print(table)

    if stats.asset_distribution:
        table = Table(title="Assets", show_header=True, header_style="bold magenta")
        table.add_column("Asset", style="cyan")
        table.add_column("Trades", justify="right")
        table.add_column("Share", justify="right")
        for asset, count in sorted(stats.asset_distribution.items(), key=lambda kv: -kv[1]):
            table.add_row(asset, str(count), f"{count / stats.total_trades * 100:.1f}%")
        console.print(table)

    console.print("\n[bold]Insights[/bold]")
    if stats.best_asset:
        console.print(f"  Best asset: [green]{stats.best_asset.asset}[/green] ({format_pnl(stats.best_asset.pnl)})")
        console.print(f"  Worst asset: [red]{stats.worst_asset.asset}[/red] ({format_pnl(stats.worst_asset.pnl)})")
    else:
        console.print("  [dim]No data available[/dim]")
    console.print(f"  Risk: {stats.risk_assessment}\n")


if __name__ == "__main__":
    app()
