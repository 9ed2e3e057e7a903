"""
Trade entry.

Turns raw form or CLI input into a validated Trade, computing PnL from
prices when it can. Nothing here touches the store.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from cryptojournal.core.entities import Direction, PnlType, Trade
from cryptojournal.core.errors import ValidationError
from cryptojournal.core.utils import parse_timestamp, to_decimal, utcnow

logger = logging.getLogger(__name__)

DEFAULT_LEVERAGE = 10

REQUIRED_FIELDS = {
    "asset": "Asset",
    "open_price": "Entry Price",
    "quantity": "Quantity",
    "open_time": "Open Time",
}


@dataclass
class TradeDraft:
    """Trade input exactly as typed. Every value is optional text."""

    asset: Optional[str] = None
    direction: str = "LONG"
    leverage: Optional[str] = None
    quantity: Optional[str] = None
    open_price: Optional[str] = None
    close_price: Optional[str] = None
    pnl: Optional[str] = None
    pnl_type: Optional[str] = None
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    notes: str = ""
    tags: List[str] = field(default_factory=list)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _decimal_field(name: str, value: Any) -> Optional[Decimal]:
    try:
        parsed = to_decimal(value)
    except ValueError:
        raise ValidationError(name, f"Not a number: {value!r}")
    if parsed is not None and not parsed.is_finite():
        raise ValidationError(name, f"Not a number: {value!r}")
    return parsed


def _time_field(name: str, value: Any) -> Optional[datetime]:
    try:
        return parse_timestamp(value)
    except ValueError:
        raise ValidationError(name, f"Not a date/time: {value!r}")


def parse_direction(value: Optional[str]) -> Direction:
    type_map = {
        "long": Direction.LONG,
        "buy": Direction.LONG,
        "short": Direction.SHORT,
        "sell": Direction.SHORT,
    }
    normalized = type_map.get((value or "").strip().lower())
    if not normalized:
        raise ValidationError("direction", f"Invalid direction: {value}")
    return normalized


def parse_leverage(value: Any) -> int:
    if _is_blank(value):
        return DEFAULT_LEVERAGE
    try:
        leverage = int(str(value).strip())
    except ValueError:
        raise ValidationError("leverage", f"Not a whole number: {value!r}")
    if leverage < 1:
        raise ValidationError("leverage", "Must be at least 1")
    return leverage


def parse_tags(value: Any) -> List[str]:
    """Tags from a list or a comma-separated string, blanks removed."""
    if _is_blank(value):
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [str(t).strip() for t in items if str(t).strip()]


def calculate_pnl(
    direction: Direction,
    open_price: Optional[Decimal],
    close_price: Optional[Decimal],
    quantity: Optional[Decimal],
) -> Optional[Decimal]:
    """
    PnL from prices, or None when any input is missing or not positive.

    LONG: (exit - entry) * qty
    SHORT: (entry - exit) * qty
    """
    if not all(v is not None and v > 0 for v in (open_price, close_price, quantity)):
        return None
    if direction == Direction.LONG:
        return (close_price - open_price) * quantity
    return (open_price - close_price) * quantity


def build_trade(draft: TradeDraft, owner_id: Optional[str]) -> Trade:
    """
    Validate a draft and build the Trade to save.

    Raises ValidationError naming the first missing or invalid field.
    """
    if not owner_id:
        raise ValidationError("owner_id", "Please sign in to save trades")

    missing = [name for name in REQUIRED_FIELDS if _is_blank(getattr(draft, name))]
    if missing:
        labels = ", ".join(REQUIRED_FIELDS[name] for name in missing)
        raise ValidationError(missing[0], f"Please fill in all required fields: {labels}")

    direction = parse_direction(draft.direction)
    quantity = _decimal_field("quantity", draft.quantity)
    open_price = _decimal_field("open_price", draft.open_price)
    close_price = _decimal_field("close_price", draft.close_price)

    if quantity <= 0:
        raise ValidationError("quantity", "Must be greater than zero")
    if open_price <= 0:
        raise ValidationError("open_price", "Must be greater than zero")
    if close_price is not None and close_price <= 0:
        raise ValidationError("close_price", "Must be greater than zero")

    open_time = _time_field("open_time", draft.open_time)
    close_time = _time_field("close_time", draft.close_time)
    if close_time is not None and close_time < open_time:
        raise ValidationError("close_time", "Cannot be before the open time")

    pnl = calculate_pnl(direction, open_price, close_price, quantity)
    if pnl is None:
        pnl = _decimal_field("pnl", draft.pnl) or Decimal("0")

    if _is_blank(draft.pnl_type):
        pnl_type = PnlType.UNREALIZED if close_time is None else PnlType.REALIZED
    else:
        try:
            pnl_type = PnlType(draft.pnl_type.strip().upper())
        except ValueError:
            raise ValidationError("pnl_type", f"Invalid PnL type: {draft.pnl_type}")

    return Trade(
        owner_id=owner_id,
        asset=draft.asset.strip().upper(),
        direction=direction,
        leverage=parse_leverage(draft.leverage),
        quantity=quantity,
        open_price=open_price,
        close_price=close_price,
        pnl=pnl,
        pnl_type=pnl_type,
        open_time=open_time,
        close_time=close_time,
        notes=(draft.notes or "").strip(),
        tags=parse_tags(draft.tags),
    )


def close_trade(trade: Trade, price: Any, at: Any = None) -> Dict[str, Any]:
    """
    Changes that close an open trade at a price.

    Pass the result to TradeRepository.update().
    """
    if not trade.is_open:
        raise ValidationError("close_time", f"Trade {trade.id} is already closed")

    close_price = _decimal_field("close_price", price)
    if close_price is None or close_price <= 0:
        raise ValidationError("close_price", "Must be greater than zero")

    close_time = _time_field("close_time", at) or utcnow()
    if close_time < trade.open_time:
        raise ValidationError("close_time", "Cannot be before the open time")

    pnl = calculate_pnl(trade.direction, trade.open_price, close_price, trade.quantity)
    logger.info(f"Closing {trade.asset} at {close_price}: pnl={pnl}")

    return {
        "close_price": close_price,
        "close_time": close_time,
        "pnl": pnl,
        "pnl_type": PnlType.REALIZED,
    }
