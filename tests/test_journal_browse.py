"""
Unit tests for journal browsing, export and the capital overview.
"""

import csv
import json
import pytest
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptojournal.core.entities import Direction, Trade, TradeStatus, UserSettings
from cryptojournal.core.errors import ValidationError
from cryptojournal.journal.browse import JournalQuery, browse, export_csv, export_json
from cryptojournal.review.overview import HISTORY_DAYS, build_overview

NOW = datetime(2025, 2, 1, tzinfo=timezone.utc)


def make_trade(asset, pnl, days_ago, direction=Direction.LONG, closed=True, notes="", tags=None):
    opened = NOW - timedelta(days=days_ago)
    return Trade(
        id=f"{asset}-{days_ago}",
        owner_id="user-1",
        asset=asset,
        direction=direction,
        leverage=5,
        quantity=Decimal("1"),
        open_price=Decimal("100"),
        close_price=Decimal("110") if closed else None,
        open_time=opened,
        close_time=opened + timedelta(hours=4) if closed else None,
        pnl=Decimal(str(pnl)),
        notes=notes,
        tags=tags or [],
    )


@pytest.fixture
def trades():
    return [
        make_trade("BTC/USDT", 120, 10, notes="Range breakout", tags=["swing"]),
        make_trade("ETH/USDT", -30, 5, direction=Direction.SHORT, tags=["scalp"]),
        make_trade("SOL/USDT", 45, 2, closed=False, notes="waiting on btc"),
    ]


class TestBrowse:
    """Search, filters and sort."""

    def test_default_newest_first(self, trades):
        result = browse(trades)
        assert [t.asset for t in result] == ["SOL/USDT", "ETH/USDT", "BTC/USDT"]

    def test_search_asset_or_notes(self, trades):
        result = browse(trades, JournalQuery(search="BTC"))
        assert {t.asset for t in result} == {"BTC/USDT", "SOL/USDT"}

    def test_direction_filter(self, trades):
        result = browse(trades, JournalQuery(directions=[Direction.SHORT]))
        assert [t.asset for t in result] == ["ETH/USDT"]

    def test_status_filter(self, trades):
        result = browse(trades, JournalQuery(status=TradeStatus.OPEN))
        assert [t.asset for t in result] == ["SOL/USDT"]

    def test_asset_filter_case_insensitive(self, trades):
        result = browse(trades, JournalQuery(assets=["eth/usdt"]))
        assert [t.asset for t in result] == ["ETH/USDT"]

    def test_tag_filter(self, trades):
        result = browse(trades, JournalQuery(tags=["swing", "scalp"]))
        assert {t.asset for t in result} == {"BTC/USDT", "ETH/USDT"}

    def test_sort_by_pnl_ascending(self, trades):
        result = browse(trades, JournalQuery(sort_by="pnl", descending=False))
        assert [t.pnl for t in result] == [Decimal("-30"), Decimal("45"), Decimal("120")]

    def test_open_trades_sort_oldest_by_close_time(self, trades):
        result = browse(trades, JournalQuery(sort_by="close_time"))
        assert result[-1].asset == "SOL/USDT"

    def test_unknown_sort_key(self, trades):
        with pytest.raises(ValidationError):
            browse(trades, JournalQuery(sort_by="leverage"))


class TestExport:
    """CSV and JSON export."""

    def test_csv(self, trades, tmp_path):
        output = tmp_path / "out" / "trades.csv"

        assert export_csv(trades, str(output)) == 3

        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["asset"] == "BTC/USDT"
        assert rows[0]["tags"] == "swing"
        assert rows[2]["close_time"] == ""
        assert rows[2]["status"] == "OPEN"

    def test_json_keeps_decimal_text(self, tmp_path):
        trade = make_trade("BTC/USDT", "0.30000000000000000001", 1)
        output = tmp_path / "trades.json"

        export_json([trade], str(output))

        data = json.loads(output.read_text())
        assert data[0]["pnl"] == "0.30000000000000000001"
        assert data[0]["direction"] == "LONG"


class TestOverview:
    """Dashboard figures."""

    def test_totals(self, trades):
        overview = build_overview(trades, UserSettings(owner_id="user-1", starting_capital=Decimal("1000")), now=NOW)

        assert overview.net_pnl == Decimal("135")
        assert overview.total_capital == Decimal("1135")
        assert overview.net_pnl_percentage == pytest.approx(13.5)
        assert overview.open_positions == 1
        assert overview.win_rate == pytest.approx(200 / 3)

    def test_history_runs_in_open_time_order(self, trades):
        overview = build_overview(trades, UserSettings(owner_id="user-1", starting_capital=Decimal("1000")), now=NOW)
        history = overview.capital_history

        assert history[0].date == NOW - timedelta(days=HISTORY_DAYS)
        assert history[0].capital == Decimal("1000")
        assert [h.capital for h in history[1:-1]] == [Decimal("1120"), Decimal("1090"), Decimal("1135")]
        assert history[-1].date == NOW
        assert history[-1].capital == Decimal("1135")

    def test_no_settings(self):
        overview = build_overview([], None, now=NOW)

        assert overview.starting_capital == 0
        assert overview.total_capital == 0
        assert overview.net_pnl_percentage == 0
        assert overview.win_rate == 0
        assert len(overview.capital_history) == 2
