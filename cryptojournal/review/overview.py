"""
Capital overview.

Dashboard figures derived from the owner's trades and starting capital.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from cryptojournal.core.entities import Trade, UserSettings
from cryptojournal.core.utils import utcnow
from cryptojournal.review.chart import CapitalSample

logger = logging.getLogger(__name__)

HISTORY_DAYS = 30


@dataclass
class CapitalOverview:
    starting_capital: Decimal
    net_pnl: Decimal
    total_capital: Decimal
    net_pnl_percentage: float
    total_trades: int
    open_positions: int
    win_rate: float
    capital_history: List[CapitalSample] = field(default_factory=list)


def capital_history(
    trades: List[Trade],
    starting_capital: Decimal,
    now: datetime,
) -> List[CapitalSample]:
    """
    Running capital over time.

    Starts HISTORY_DAYS before now at the starting capital, adds one
    point per trade in open-time order and ends at now with the total.
    """
    history = [CapitalSample(now - timedelta(days=HISTORY_DAYS), starting_capital)]

    running = starting_capital
    for trade in sorted(trades, key=lambda t: t.open_time):
        running += trade.pnl
        history.append(CapitalSample(trade.open_time, running))

    history.append(CapitalSample(now, running))
    return history


def build_overview(
    trades: List[Trade],
    user_settings: Optional[UserSettings],
    now: Optional[datetime] = None,
) -> CapitalOverview:
    now = now or utcnow()
    starting = user_settings.starting_capital if user_settings else Decimal("0")

    net_pnl = sum((t.pnl for t in trades), Decimal("0"))
    total = len(trades)
    wins = sum(1 for t in trades if t.pnl > 0)

    overview = CapitalOverview(
        starting_capital=starting,
        net_pnl=net_pnl,
        total_capital=starting + net_pnl,
        net_pnl_percentage=float(net_pnl / starting * 100) if starting > 0 else 0.0,
        total_trades=total,
        open_positions=sum(1 for t in trades if t.is_open),
        win_rate=wins / total * 100 if total else 0.0,
        capital_history=capital_history(trades, starting, now),
    )

    logger.debug(f"Overview: capital={overview.total_capital} trades={total}")
    return overview
