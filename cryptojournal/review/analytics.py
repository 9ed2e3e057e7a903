"""
Trade analytics module.

Aggregate performance statistics over a set of trades, and the
time-window filter applied before them.
"""

import calendar
import logging
import statistics
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from cryptojournal.core.entities import Trade
from cryptojournal.core.errors import ValidationError
from cryptojournal.core.utils import utcnow

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class Timeframe(str, Enum):
    """Analysis window."""
    WEEK = "1W"
    MONTH = "1M"
    QUARTER = "3M"
    HALF_YEAR = "6M"
    YEAR = "1Y"
    ALL = "ALL"

    @classmethod
    def parse(cls, value: str) -> "Timeframe":
        try:
            return cls(value.strip().upper())
        except ValueError:
            choices = ", ".join(t.value for t in cls)
            raise ValidationError("timeframe", f"Unknown timeframe {value!r} (choose from {choices})")


# Calendar months per timeframe
_MONTHS = {
    Timeframe.MONTH: 1,
    Timeframe.QUARTER: 3,
    Timeframe.HALF_YEAR: 6,
    Timeframe.YEAR: 12,
}


def subtract_months(moment: datetime, months: int) -> datetime:
    """
    Same day and time N calendar months earlier.

    The day is clamped to the length of the target month,
    so Mar 31 minus one month is the last day of February.
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def timeframe_cutoff(timeframe: Timeframe, now: Optional[datetime] = None) -> Optional[datetime]:
    """Earliest open time kept by the timeframe. None for ALL."""
    now = now or utcnow()
    if timeframe == Timeframe.ALL:
        return None
    if timeframe == Timeframe.WEEK:
        return now - timedelta(days=7)
    return subtract_months(now, _MONTHS[timeframe])


def filter_by_timeframe(
    trades: List[Trade],
    timeframe: Timeframe,
    now: Optional[datetime] = None,
) -> List[Trade]:
    """Trades opened at or after the timeframe's cutoff."""
    cutoff = timeframe_cutoff(timeframe, now)
    if cutoff is None:
        return list(trades)
    return [t for t in trades if t.open_time >= cutoff]


@dataclass
class AssetPerformance:
    asset: str
    pnl: Decimal


@dataclass
class TradeAnalytics:
    """Aggregate statistics for a set of trades."""

    total_pnl: Decimal = ZERO
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    average_win: Decimal = ZERO
    average_loss: Decimal = ZERO
    best_asset: Optional[AssetPerformance] = None
    worst_asset: Optional[AssetPerformance] = None
    asset_distribution: Dict[str, int] = field(default_factory=dict)
    daily_trades: int = 0
    weekly_trades: int = 0
    monthly_trades: int = 0
    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0

    @property
    def risk_assessment(self) -> str:
        if self.sharpe_ratio > 1:
            return "Good risk-adjusted returns"
        if self.sharpe_ratio > 0:
            return "Moderate risk-adjusted returns"
        return "Poor risk-adjusted returns"


def _mean(values: List[Decimal]) -> Decimal:
    return sum(values, ZERO) / len(values) if values else ZERO


def max_drawdown(pnls: Iterable[Decimal]) -> float:
    """
    Largest percentage drop of cumulative PnL from its running peak.

    Only peaks above zero count. Input order matters.
    """
    peak = ZERO
    running = ZERO
    worst = 0.0

    for pnl in pnls:
        running += pnl
        if running > peak:
            peak = running
        if peak > 0:
            drawdown = float((peak - running) / peak * 100)
            if drawdown > worst:
                worst = drawdown

    return worst


def compute_analytics(trades: List[Trade], now: Optional[datetime] = None) -> TradeAnalytics:
    """
    Compute statistics for the given trades.

    Empty input yields the all-zero result.
    """
    if not trades:
        return TradeAnalytics()

    now = now or utcnow()
    pnls = [t.pnl for t in trades]
    total = len(trades)

    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]

    # Asset buckets
    asset_pnl: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for trade in trades:
        asset_pnl[trade.asset] += trade.pnl

    best = None
    worst = None
    for asset, pnl in asset_pnl.items():
        if best is None or pnl > best.pnl:
            best = AssetPerformance(asset, pnl)
        if worst is None or pnl < worst.pnl:
            worst = AssetPerformance(asset, pnl)

    # Frequency
    def opened_since(delta: timedelta) -> int:
        cutoff = now - delta
        return sum(1 for t in trades if t.open_time >= cutoff)

    # Risk
    volatility = statistics.pstdev(float(p) for p in pnls)
    mean = float(sum(pnls, ZERO)) / total
    sharpe = mean / volatility if volatility > 0 else 0.0

    analytics = TradeAnalytics(
        total_pnl=sum(pnls, ZERO),
        total_trades=total,
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=len(wins) / total * 100,
        average_win=_mean(wins),
        average_loss=_mean(losses),
        best_asset=best,
        worst_asset=worst,
        asset_distribution=dict(Counter(t.asset for t in trades)),
        daily_trades=opened_since(timedelta(days=1)),
        weekly_trades=opened_since(timedelta(days=7)),
        monthly_trades=opened_since(timedelta(days=30)),
        volatility=volatility,
        sharpe_ratio=sharpe,
        max_drawdown=max_drawdown(pnls),
    )

    logger.debug(f"Analytics over {total} trades: pnl={analytics.total_pnl}")
    return analytics
