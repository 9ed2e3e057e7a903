"""
Unit tests for trade analytics.

Tests the aggregate statistics and the timeframe filter.
"""

import pytest
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptojournal.core.entities import Direction, Trade
from cryptojournal.core.errors import ValidationError
from cryptojournal.review.analytics import (
    Timeframe,
    compute_analytics,
    filter_by_timeframe,
    max_drawdown,
    subtract_months,
)

NOW = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)


def make_trade(pnl, asset="BTC/USDT", opened=None):
    return Trade(
        owner_id="user-1",
        asset=asset,
        direction=Direction.LONG,
        leverage=10,
        quantity=Decimal("1"),
        open_price=Decimal("100"),
        open_time=opened or NOW - timedelta(hours=1),
        pnl=Decimal(str(pnl)),
    )


class TestEmptyInput:
    """No trades gives the neutral result."""

    def test_all_zero(self):
        stats = compute_analytics([], now=NOW)

        assert stats.total_pnl == 0
        assert stats.total_trades == 0
        assert stats.win_rate == 0
        assert stats.average_win == 0
        assert stats.average_loss == 0
        assert stats.volatility == 0
        assert stats.sharpe_ratio == 0
        assert stats.max_drawdown == 0
        assert stats.asset_distribution == {}

    def test_no_best_or_worst_asset(self):
        stats = compute_analytics([], now=NOW)

        assert stats.best_asset is None
        assert stats.worst_asset is None


class TestPerformance:
    """Totals, win rate and averages."""

    def test_reference_trades(self):
        stats = compute_analytics([make_trade(100), make_trade(-40), make_trade(60)], now=NOW)

        assert stats.total_pnl == Decimal("120")
        assert stats.win_rate == pytest.approx(66.67, abs=0.01)
        assert stats.average_win == Decimal("80")
        assert stats.average_loss == Decimal("-40")
        assert stats.winning_trades == 2
        assert stats.losing_trades == 1
        assert stats.total_trades == 3

    def test_average_loss_stays_negative(self):
        stats = compute_analytics([make_trade(-10), make_trade(-30)], now=NOW)

        assert stats.average_loss == Decimal("-20")
        assert stats.average_win == 0
        assert stats.win_rate == 0

    def test_zero_pnl_is_neither_win_nor_loss(self):
        stats = compute_analytics([make_trade(0), make_trade(50)], now=NOW)

        assert stats.winning_trades == 1
        assert stats.losing_trades == 0
        assert stats.win_rate == 50

    def test_decimal_precision_kept(self):
        stats = compute_analytics([make_trade("0.1"), make_trade("0.2")], now=NOW)

        assert stats.total_pnl == Decimal("0.3")


class TestAssets:
    """Per-asset buckets."""

    def test_best_and_worst_by_summed_pnl(self):
        trades = [
            make_trade(100, "BTC/USDT"),
            make_trade(-150, "BTC/USDT"),
            make_trade(20, "ETH/USDT"),
            make_trade(30, "SOL/USDT"),
        ]

        stats = compute_analytics(trades, now=NOW)

        assert stats.best_asset.asset == "SOL/USDT"
        assert stats.best_asset.pnl == Decimal("30")
        assert stats.worst_asset.asset == "BTC/USDT"
        assert stats.worst_asset.pnl == Decimal("-50")

    def test_distribution_counts_trades(self):
        trades = [make_trade(1, "BTC/USDT"), make_trade(2, "BTC/USDT"), make_trade(3, "ETH/USDT")]

        stats = compute_analytics(trades, now=NOW)

        assert stats.asset_distribution == {"BTC/USDT": 2, "ETH/USDT": 1}

    def test_single_asset_is_best_and_worst(self):
        stats = compute_analytics([make_trade(5, "ETH/USDT")], now=NOW)

        assert stats.best_asset.asset == "ETH/USDT"
        assert stats.worst_asset.asset == "ETH/USDT"


class TestFrequency:
    """Trades opened in the last day, week and month."""

    def test_windows(self):
        trades = [
            make_trade(1, opened=NOW - timedelta(hours=2)),
            make_trade(1, opened=NOW - timedelta(days=3)),
            make_trade(1, opened=NOW - timedelta(days=20)),
            make_trade(1, opened=NOW - timedelta(days=45)),
        ]

        stats = compute_analytics(trades, now=NOW)

        assert stats.daily_trades == 1
        assert stats.weekly_trades == 2
        assert stats.monthly_trades == 3


class TestRisk:
    """Volatility, ratio and drawdown."""

    def test_population_stdev(self):
        # Mean 5, squared deviations 9+1+1+9 -> variance 5
        stats = compute_analytics([make_trade(2), make_trade(4), make_trade(6), make_trade(8)], now=NOW)

        assert stats.volatility == pytest.approx(5 ** 0.5)
        assert stats.sharpe_ratio == pytest.approx(5 / 5 ** 0.5)

    def test_volatility_order_invariant(self):
        pnls = [100, -40, 60, 12.5, -7]
        forward = compute_analytics([make_trade(p) for p in pnls], now=NOW)
        backward = compute_analytics([make_trade(p) for p in reversed(pnls)], now=NOW)

        assert forward.volatility == backward.volatility

    def test_zero_volatility_gives_zero_ratio(self):
        stats = compute_analytics([make_trade(10), make_trade(10)], now=NOW)

        assert stats.volatility == 0
        assert stats.sharpe_ratio == 0

    def test_drawdown_from_running_peak(self):
        # Running: 100, 50, 80 -> peak 100, drop to 50 = 50%
        assert max_drawdown([Decimal("100"), Decimal("-50"), Decimal("30")]) == pytest.approx(50.0)

    def test_no_drawdown_while_rising(self):
        assert max_drawdown([Decimal("10"), Decimal("20"), Decimal("5")]) == 0

    def test_drawdown_ignores_non_positive_peak(self):
        assert max_drawdown([Decimal("-10"), Decimal("-20")]) == 0

    def test_drawdown_uses_input_order(self):
        pnls = [Decimal("-50"), Decimal("100")]

        assert max_drawdown(pnls) == 0
        assert max_drawdown(list(reversed(pnls))) == pytest.approx(50.0)

    def test_risk_assessment(self):
        stats = compute_analytics([make_trade(10), make_trade(10), make_trade(9)], now=NOW)

        assert stats.risk_assessment == "Good risk-adjusted returns"
        assert compute_analytics([], now=NOW).risk_assessment == "Poor risk-adjusted returns"


class TestTimeframe:
    """Timeframe parsing and filtering."""

    def test_parse(self):
        assert Timeframe.parse("1m") == Timeframe.MONTH
        assert Timeframe.parse(" all ") == Timeframe.ALL

    def test_parse_unknown(self):
        with pytest.raises(ValidationError) as exc:
            Timeframe.parse("2W")
        assert exc.value.field == "timeframe"

    def test_month_subtraction_clamps_day(self):
        assert subtract_months(NOW, 1) == datetime(2025, 2, 28, 12, 0, tzinfo=timezone.utc)

    def test_month_subtraction_leap_year(self):
        moment = datetime(2024, 3, 31, tzinfo=timezone.utc)
        assert subtract_months(moment, 1) == datetime(2024, 2, 29, tzinfo=timezone.utc)

    def test_month_subtraction_crosses_year(self):
        moment = datetime(2025, 2, 15, tzinfo=timezone.utc)
        assert subtract_months(moment, 3) == datetime(2024, 11, 15, tzinfo=timezone.utc)
        assert subtract_months(moment, 12) == datetime(2024, 2, 15, tzinfo=timezone.utc)

    def test_week_filter(self):
        recent = make_trade(1, opened=NOW - timedelta(days=6))
        edge = make_trade(2, opened=NOW - timedelta(days=7))
        old = make_trade(3, opened=NOW - timedelta(days=8))

        kept = filter_by_timeframe([recent, edge, old], Timeframe.WEEK, now=NOW)

        assert kept == [recent, edge]

    def test_month_filter_uses_calendar(self):
        inside = make_trade(1, opened=datetime(2025, 2, 28, 13, 0, tzinfo=timezone.utc))
        outside = make_trade(2, opened=datetime(2025, 2, 27, 12, 0, tzinfo=timezone.utc))

        kept = filter_by_timeframe([inside, outside], Timeframe.MONTH, now=NOW)

        assert kept == [inside]

    def test_all_returns_everything(self):
        trades = [make_trade(1, opened=NOW - timedelta(days=3000))]

        assert filter_by_timeframe(trades, Timeframe.ALL, now=NOW) == trades
