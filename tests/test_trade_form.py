"""
Unit tests for trade entry validation and PnL calculation.
"""

import pytest
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptojournal.core.entities import Direction, PnlType
from cryptojournal.core.errors import ValidationError
from cryptojournal.journal.form import (
    DEFAULT_LEVERAGE,
    TradeDraft,
    build_trade,
    calculate_pnl,
    close_trade,
)

OWNER = "user-1"


def draft(**overrides):
    fields = dict(
        asset="btc/usdt",
        direction="LONG",
        quantity="0.5",
        open_price="60000",
        open_time="2025-01-10T09:30:00Z",
    )
    fields.update(overrides)
    return TradeDraft(**fields)


class TestRequiredFields:
    """Each missing field is named."""

    @pytest.mark.parametrize("name", ["asset", "open_price", "quantity", "open_time"])
    def test_missing_field_named(self, name):
        with pytest.raises(ValidationError) as exc:
            build_trade(draft(**{name: ""}), OWNER)
        assert exc.value.field == name

    def test_all_missing_listed(self):
        with pytest.raises(ValidationError) as exc:
            build_trade(TradeDraft(), OWNER)

        assert exc.value.field == "asset"
        assert "Asset, Entry Price, Quantity, Open Time" in exc.value.message

    def test_no_owner(self):
        with pytest.raises(ValidationError) as exc:
            build_trade(draft(), None)
        assert exc.value.field == "owner_id"

    def test_bad_number_named(self):
        with pytest.raises(ValidationError) as exc:
            build_trade(draft(quantity="lots"), OWNER)
        assert exc.value.field == "quantity"

    def test_bad_date_named(self):
        with pytest.raises(ValidationError) as exc:
            build_trade(draft(open_time="yesterday"), OWNER)
        assert exc.value.field == "open_time"

    def test_close_before_open_rejected(self):
        with pytest.raises(ValidationError) as exc:
            build_trade(draft(close_time="2025-01-09T00:00:00Z"), OWNER)
        assert exc.value.field == "close_time"


class TestBuildTrade:
    """Normalization and defaults."""

    def test_defaults(self):
        trade = build_trade(draft(), OWNER)

        assert trade.asset == "BTC/USDT"
        assert trade.direction == Direction.LONG
        assert trade.leverage == DEFAULT_LEVERAGE
        assert trade.pnl == 0
        assert trade.pnl_type == PnlType.UNREALIZED
        assert trade.open_time == datetime(2025, 1, 10, 9, 30, tzinfo=timezone.utc)
        assert trade.is_open

    def test_any_precision(self):
        trade = build_trade(draft(quantity="0.000000012345678901"), OWNER)
        assert trade.quantity == Decimal("0.000000012345678901")

    def test_leverage_must_be_positive(self):
        with pytest.raises(ValidationError) as exc:
            build_trade(draft(leverage="0"), OWNER)
        assert exc.value.field == "leverage"

    def test_short_direction_aliases(self):
        assert build_trade(draft(direction="sell"), OWNER).direction == Direction.SHORT

    def test_tags_from_text(self):
        trade = build_trade(draft(tags="scalp, news,,"), OWNER)
        assert trade.tags == ["scalp", "news"]

    def test_explicit_pnl_without_exit(self):
        trade = build_trade(draft(pnl="-42.10"), OWNER)
        assert trade.pnl == Decimal("-42.10")

    def test_closed_trade_is_realized(self):
        trade = build_trade(draft(close_price="61000", close_time="2025-01-11T00:00:00Z"), OWNER)
        assert trade.pnl_type == PnlType.REALIZED


class TestPnl:
    """PnL auto-calculation."""

    def test_long(self):
        trade = build_trade(draft(close_price="61000"), OWNER)
        assert trade.pnl == Decimal("500.0")

    def test_short(self):
        trade = build_trade(draft(direction="SHORT", close_price="61000"), OWNER)
        assert trade.pnl == Decimal("-500.0")

    def test_calculated_pnl_wins_over_typed(self):
        trade = build_trade(draft(close_price="59000", pnl="999"), OWNER)
        assert trade.pnl == Decimal("-500.0")

    def test_needs_all_prices(self):
        assert calculate_pnl(Direction.LONG, Decimal("1"), None, Decimal("1")) is None
        assert calculate_pnl(Direction.LONG, Decimal("1"), Decimal("2"), Decimal("0")) is None


class TestCloseTrade:
    """Closing an open trade."""

    def test_changes(self):
        trade = build_trade(draft(direction="SHORT"), OWNER)
        at = datetime(2025, 1, 12, tzinfo=timezone.utc)

        changes = close_trade(trade, "58000", at=at)

        assert changes["close_price"] == Decimal("58000")
        assert changes["close_time"] == at
        assert changes["pnl"] == Decimal("1000.0")
        assert changes["pnl_type"] == PnlType.REALIZED

    def test_already_closed(self):
        trade = build_trade(draft(close_price="61000", close_time="2025-01-11T00:00:00Z"), OWNER)

        with pytest.raises(ValidationError):
            close_trade(trade, "62000")

    def test_invalid_price(self):
        trade = build_trade(draft(), OWNER)

        with pytest.raises(ValidationError) as exc:
            close_trade(trade, "-1")
        assert exc.value.field == "close_price"
