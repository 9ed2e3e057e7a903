"""
Utility functions for CryptoJournal.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

Number = Union[Decimal, float, int]

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for scripts."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a stored or typed value to Decimal without passing through float.

    Returns None for None and empty strings.
    Raises ValueError for anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or datetime) into an aware UTC datetime.

    Naive values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as ISO-8601 in UTC."""
    if value is None:
        return None
    return parse_timestamp(value).isoformat()


def format_currency(amount: Number, decimals: int = 2) -> str:
    """
    Format as US dollars.

    Examples:
        1234.5 -> "$1,234.50"
        -40 -> "-$40.00"
    """
    value = float(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


def format_compact_currency(amount: Number) -> str:
    """
    Format with K/M/B suffixes above one thousand.

    Examples:
        950 -> "$950"
        1500 -> "$1.5K"
        2500000 -> "$2.5M"
        1000000000 -> "$1.0B"
    """
    value = float(amount)
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.1f}B"
    elif value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    elif value >= 1_000:
        return f"${value / 1_000:.1f}K"
    return format_currency(value, decimals=0)


def format_pnl(amount: Number) -> str:
    """Signed currency, e.g. "+$12.00" or "-$3.50"."""
    text = format_currency(amount)
    return text if float(amount) < 0 else f"+{text}"


def format_short_date(value: Union[date, datetime]) -> str:
    """Month and day, e.g. "Jan 5"."""
    return f"{value:%b} {value.day}"


def format_datetime(value: Optional[datetime]) -> str:
    """Human-readable timestamp, e.g. "Jan 5, 2025 14:30"."""
    if value is None:
        return "-"
    return f"{value:%b} {value.day}, {value:%Y %H:%M}"
