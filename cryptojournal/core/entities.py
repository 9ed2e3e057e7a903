"""
Domain entities for CryptoJournal.

Entities: Trade, UserSettings, SmartWithdrawalSettings, WithdrawalTransaction.
Money and quantities are Decimal throughout.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class Direction(str, Enum):
    """Side of a position."""
    LONG = "LONG"
    SHORT = "SHORT"


class PnlType(str, Enum):
    """Whether the PnL is booked or still floating."""
    REALIZED = "REALIZED"
    UNREALIZED = "UNREALIZED"


class TradeStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class WithdrawalAction(str, Enum):
    """Ledger entry kind."""
    WITHDRAW = "WITHDRAW"
    REVERT = "REVERT"


@dataclass
class Trade:
    """
    A single logged position.

    A trade without close_time is still open and its PnL is unrealized.
    """

    owner_id: str
    asset: str
    direction: Direction
    leverage: int
    quantity: Decimal
    open_price: Decimal
    open_time: datetime
    pnl: Decimal = Decimal("0")
    pnl_type: PnlType = PnlType.UNREALIZED
    close_price: Optional[Decimal] = None
    close_time: Optional[datetime] = None
    notes: str = ""
    tags: List[str] = field(default_factory=list)

    # Assigned by the store
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.close_time is None

    @property
    def status(self) -> TradeStatus:
        return TradeStatus.OPEN if self.is_open else TradeStatus.CLOSED

    def __repr__(self) -> str:
        return f"<Trade {self.id}: {self.direction.value} {self.asset} x{self.leverage} pnl={self.pnl}>"


@dataclass
class UserSettings:
    """Per-owner preferences. One row per owner."""

    owner_id: str
    starting_capital: Decimal = Decimal("0")
    notifications: bool = True
    email_updates: bool = False
    auto_backup: bool = True
    theme: str = "dark"

    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class SmartWithdrawalSettings:
    """
    Profit-splitting rule.

    reinvest_percentage (0-100) of profit stays invested;
    the remainder may be withdrawn.
    """

    owner_id: str
    enabled: bool = False
    reinvest_percentage: Decimal = Decimal("50")

    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class WithdrawalTransaction:
    """
    Append-only ledger entry.

    A REVERT entry offsets the WITHDRAW entry named by reverted_id.
    """

    owner_id: str
    amount: Decimal
    action: WithdrawalAction
    description: str = ""
    reverted_id: Optional[str] = None

    id: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"<WithdrawalTransaction {self.id}: {self.action.value} {self.amount}>"
