"""
Trade repository.

Maps Trade entities to and from rows of the trades table.
"""

import logging
from typing import Any, Dict, List, Optional

from cryptojournal.core.entities import Direction, PnlType, Trade
from cryptojournal.core.errors import GatewayError, ValidationError
from cryptojournal.core.utils import format_timestamp, parse_timestamp, to_decimal
from cryptojournal.store.base import TRADES, Gateway, Row

logger = logging.getLogger(__name__)

# Entity attribute -> column
_COLUMNS = {
    "owner_id": "user_id",
    "asset": "asset",
    "direction": "type",
    "leverage": "leverage",
    "quantity": "quantity",
    "open_price": "open_price",
    "close_price": "close_price",
    "pnl": "pnl",
    "pnl_type": "pnl_type",
    "open_time": "open_time",
    "close_time": "close_time",
    "notes": "notes",
    "tags": "selected_tags",
}

_DECIMAL_FIELDS = {"quantity", "open_price", "close_price", "pnl"}
_TIME_FIELDS = {"open_time", "close_time"}


def _encode_value(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in _DECIMAL_FIELDS:
        return str(to_decimal(value))
    if name in _TIME_FIELDS:
        return format_timestamp(value)
    if name in ("direction", "pnl_type"):
        return value.value if hasattr(value, "value") else str(value)
    if name == "tags":
        return list(value)
    return value


def trade_to_row(trade: Trade) -> Row:
    """Row for insert. Store-assigned columns are left out."""
    return {
        column: _encode_value(name, getattr(trade, name))
        for name, column in _COLUMNS.items()
    }


def changes_to_row(changes: Dict[str, Any]) -> Row:
    """Row fragment for an update, from entity attribute names."""
    unknown = set(changes) - set(_COLUMNS)
    if unknown:
        raise ValidationError(sorted(unknown)[0], "Not an editable trade field")
    if "owner_id" in changes:
        raise ValidationError("owner_id", "Trades cannot change owner")
    return {_COLUMNS[name]: _encode_value(name, value) for name, value in changes.items()}


def row_to_trade(row: Row) -> Trade:
    """Trade entity from a stored row."""
    return Trade(
        id=row.get("id"),
        owner_id=row["user_id"],
        asset=row["asset"],
        direction=Direction(row["type"]),
        leverage=int(row["leverage"]),
        quantity=to_decimal(row["quantity"]),
        open_price=to_decimal(row["open_price"]),
        close_price=to_decimal(row.get("close_price")),
        pnl=to_decimal(row.get("pnl")) or to_decimal(0),
        pnl_type=PnlType(row.get("pnl_type") or PnlType.UNREALIZED.value),
        open_time=parse_timestamp(row["open_time"]),
        close_time=parse_timestamp(row.get("close_time")),
        notes=row.get("notes") or "",
        tags=list(row.get("selected_tags") or []),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


class TradeRepository:
    """
    CRUD for trades.

    Reads without an owner return nothing; writes without one are rejected.
    """

    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    def create(self, trade: Trade) -> Trade:
        if not trade.owner_id:
            raise ValidationError("owner_id", "Please sign in to save trades")

        try:
            stored = self.gateway.insert(TRADES, trade_to_row(trade))
        except GatewayError as e:
            logger.error(f"Error saving trade {trade.asset}: {e}")
            raise

        created = row_to_trade(stored)
        logger.info(f"Saved trade {created.id}: {created.direction.value} {created.asset}")
        return created

    def list_for_owner(self, owner_id: Optional[str]) -> List[Trade]:
        """All trades of the owner, newest first."""
        if not owner_id:
            return []

        try:
            rows = self.gateway.select(
                TRADES, {"user_id": owner_id}, order_by="created_at", descending=True
            )
        except GatewayError as e:
            logger.error(f"Error fetching trades: {e}")
            raise

        return [row_to_trade(row) for row in rows]

    def get(self, trade_id: str) -> Optional[Trade]:
        rows = self.gateway.select(TRADES, {"id": trade_id})
        return row_to_trade(rows[0]) if rows else None

    def update(self, trade_id: str, **changes: Any) -> Optional[Trade]:
        """
        Update fields by entity attribute name.

        Returns None when the trade does not exist.
        """
        if not changes:
            return self.get(trade_id)

        row = changes_to_row(changes)
        try:
            stored = self.gateway.update(TRADES, trade_id, row)
        except GatewayError as e:
            logger.error(f"Error updating trade {trade_id}: {e}")
            raise

        if stored is None:
            logger.info(f"Trade {trade_id} not found for update")
            return None

        logger.info(f"Updated trade {trade_id}: {sorted(changes)}")
        return row_to_trade(stored)

    def delete(self, trade_id: str) -> bool:
        try:
            deleted = self.gateway.delete(TRADES, trade_id)
        except GatewayError as e:
            logger.error(f"Error deleting trade {trade_id}: {e}")
            raise

        if deleted:
            logger.info(f"Deleted trade {trade_id}")
        return deleted

    def clear_all(self, owner_id: Optional[str]) -> int:
        """Delete every trade of the owner. Returns the number deleted."""
        deleted = 0
        for trade in self.list_for_owner(owner_id):
            if trade.id and self.delete(trade.id):
                deleted += 1

        logger.info(f"Cleared {deleted} trade(s) for {owner_id}")
        return deleted
