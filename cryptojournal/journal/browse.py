"""
Journal browsing.

Search, filter and sort a list of trades, and export them to CSV or JSON.
"""

import csv
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from cryptojournal.core.entities import Direction, Trade, TradeStatus
from cryptojournal.core.errors import ValidationError
from cryptojournal.core.utils import format_timestamp

logger = logging.getLogger(__name__)

SORT_KEYS = ("open_time", "close_time", "pnl", "asset")

# Missing close time sorts as the oldest
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

CSV_COLUMNS = [
    "id",
    "asset",
    "direction",
    "leverage",
    "quantity",
    "open_price",
    "close_price",
    "pnl",
    "pnl_type",
    "status",
    "open_time",
    "close_time",
    "notes",
    "tags",
]


@dataclass
class JournalQuery:
    """Filters and ordering for the journal view. Empty filters match everything."""

    search: str = ""
    assets: List[str] = field(default_factory=list)
    directions: List[Direction] = field(default_factory=list)
    status: Optional[TradeStatus] = None
    tags: List[str] = field(default_factory=list)
    sort_by: str = "open_time"
    descending: bool = True


def matches(trade: Trade, query: JournalQuery) -> bool:
    term = query.search.strip().lower()
    if term and term not in trade.asset.lower() and term not in (trade.notes or "").lower():
        return False

    if query.assets and trade.asset.upper() not in {a.upper() for a in query.assets}:
        return False

    if query.directions and trade.direction not in query.directions:
        return False

    if query.status and trade.status != query.status:
        return False

    if query.tags and not set(query.tags) & set(trade.tags):
        return False

    return True


def _sort_key(sort_by: str):
    if sort_by == "open_time":
        return lambda t: t.open_time
    if sort_by == "close_time":
        return lambda t: t.close_time or _OLDEST
    if sort_by == "pnl":
        return lambda t: t.pnl
    return lambda t: t.asset.upper()


def browse(trades: List[Trade], query: Optional[JournalQuery] = None) -> List[Trade]:
    """Trades matching the query, in the requested order."""
    query = query or JournalQuery()
    if query.sort_by not in SORT_KEYS:
        raise ValidationError("sort_by", f"Sort by one of: {', '.join(SORT_KEYS)}")

    selected = [t for t in trades if matches(t, query)]
    return sorted(selected, key=_sort_key(query.sort_by), reverse=query.descending)


def trade_record(trade: Trade) -> Dict[str, Any]:
    """Flat, text-friendly view of a trade for export."""

    def text(value: Optional[Decimal]) -> str:
        return "" if value is None else str(value)

    return {
        "id": trade.id or "",
        "asset": trade.asset,
        "direction": trade.direction.value,
        "leverage": trade.leverage,
        "quantity": text(trade.quantity),
        "open_price": text(trade.open_price),
        "close_price": text(trade.close_price),
        "pnl": text(trade.pnl),
        "pnl_type": trade.pnl_type.value,
        "status": trade.status.value,
        "open_time": format_timestamp(trade.open_time) or "",
        "close_time": format_timestamp(trade.close_time) or "",
        "notes": trade.notes or "",
        "tags": list(trade.tags),
    }


def export_csv(trades: List[Trade], output: str) -> int:
    """Write trades to a CSV file. Returns the number written."""
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for trade in trades:
            record = trade_record(trade)
            record["tags"] = ";".join(record["tags"])
            writer.writerow(record)

    logger.info(f"Exported {len(trades)} trades to {path}")
    return len(trades)


def export_json(trades: List[Trade], output: str) -> int:
    """Write trades to a JSON file. Decimals are kept as strings."""
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump([trade_record(t) for t in trades], f, indent=2)

    logger.info(f"Exported {len(trades)} trades to {path}")
    return len(trades)
