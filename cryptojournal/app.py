"""
Application wiring.

Builds the gateway once from configuration and hands it to every
repository. Scripts call open_journal() at startup and describe_error()
when a command fails.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from rich.console import Console
from rich.panel import Panel

from cryptojournal.core.config import Config
from cryptojournal.core.errors import (
    GatewayError,
    JournalError,
    PermissionDeniedError,
    SetupError,
    ValidationError,
)
from cryptojournal.journal.settings import SettingsRepository
from cryptojournal.journal.trades import TradeRepository
from cryptojournal.journal.withdrawals import WithdrawalLedger
from cryptojournal.store import build_gateway
from cryptojournal.store.base import Gateway
from cryptojournal.store.schema import setup_sql_for
from cryptojournal.withdrawal.service import WithdrawalService

logger = logging.getLogger(__name__)


@dataclass
class Journal:
    """Repositories and services sharing one gateway."""

    config: Config
    gateway: Gateway
    trades: TradeRepository
    settings: SettingsRepository
    ledger: WithdrawalLedger
    withdrawals: WithdrawalService

    @property
    def owner_id(self) -> Optional[str]:
        return self.config.user_id

    def total_profit(self) -> Decimal:
        """Total PnL across all of the owner's trades."""
        return sum((t.pnl for t in self.trades.list_for_owner(self.owner_id)), Decimal("0"))


def open_journal(config: Config, gateway: Optional[Gateway] = None) -> Journal:
    """Wire repositories to the configured (or given) gateway."""
    gateway = gateway or build_gateway(config)
    settings = SettingsRepository(gateway)
    ledger = WithdrawalLedger(gateway)

    return Journal(
        config=config,
        gateway=gateway,
        trades=TradeRepository(gateway),
        settings=settings,
        ledger=ledger,
        withdrawals=WithdrawalService(settings, ledger),
    )


def describe_error(error: JournalError) -> Tuple[str, str]:
    """
    Title and user-facing message for a failed command.

    Setup errors carry the SQL that creates the missing table.
    """
    if isinstance(error, ValidationError):
        return "Invalid input", f"{error.field}: {error.message}"

    if isinstance(error, SetupError):
        lines = [error.message]
        if error.hint:
            lines.append(error.hint)
        if error.code != "CONFIG":
            lines.append("Run this in the Supabase SQL editor (or scripts/setup.py --sql):")
            lines.append(setup_sql_for(error.table))
        return "Database setup required", "\n".join(lines)

    if isinstance(error, PermissionDeniedError):
        return (
            "Permission denied",
            f"{error.message}\nCheck that you are signed in and the row-level security policies are installed.",
        )

    if isinstance(error, GatewayError):
        return "Store error", str(error)

    return "Error", str(error)


def report_error(console: Console, error: JournalError) -> None:
    """Print a failed command's error as a panel."""
    title, message = describe_error(error)
    logger.debug(f"{title}: {error!r}")
    console.print(Panel(message, title=f"[bold red]{title}[/bold red]", border_style="red"))
