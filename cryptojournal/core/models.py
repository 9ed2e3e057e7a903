"""
Database models for the local SQLite store.

Models: TradeRow, UserSettingsRow, SmartWithdrawalSettingsRow,
WithdrawalTransactionRow. Table and column names match the hosted
schema so rows look the same whichever backend serves them.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from cryptojournal.core.utils import parse_timestamp, to_decimal


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DecimalText(TypeDecorator):
    """
    Decimal stored as text.

    SQLite has no exact numeric type; text keeps every digit.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(to_decimal(value))

    def process_result_value(self, value, dialect):
        return to_decimal(value)


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored as naive UTC, returned as aware UTC.

    Accepts datetimes or ISO-8601 strings on the way in.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return parse_timestamp(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    def to_row(self) -> Dict[str, Any]:
        """Column values keyed by column name."""
        return {column.name: getattr(self, column.key) for column in self.__table__.columns}


class TradeRow(Base):
    """
    A logged trade.

    close_price and close_time stay null while the position is open.
    """

    __tablename__ = "trades"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    asset: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(5), nullable=False)  # LONG or SHORT
    leverage: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    open_price: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    close_price: Mapped[Optional[Decimal]] = mapped_column(DecimalText, nullable=True)
    pnl: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    pnl_type: Mapped[str] = mapped_column(String(10), nullable=False)  # REALIZED or UNREALIZED
    open_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    close_time: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    selected_tags: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_now, onupdate=_now)

    def __repr__(self) -> str:
        return f"<TradeRow {self.id}: {self.type} {self.asset} pnl={self.pnl}>"


class UserSettingsRow(Base):
    """Preferences, one row per user."""

    __tablename__ = "user_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    starting_capital: Mapped[Decimal] = mapped_column(DecimalText, default=Decimal("0"))
    notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    email_updates: Mapped[bool] = mapped_column(Boolean, default=False)
    auto_backup: Mapped[bool] = mapped_column(Boolean, default=True)
    theme: Mapped[str] = mapped_column(String(20), default="dark")
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_now, onupdate=_now)


class SmartWithdrawalSettingsRow(Base):
    """Withdrawal rule, one row per user."""

    __tablename__ = "smart_withdrawal_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    reinvest_percentage: Mapped[Decimal] = mapped_column(DecimalText, default=Decimal("50"))
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_now, onupdate=_now)


class WithdrawalTransactionRow(Base):
    """
    Withdrawal ledger entry.

    Rows are only ever inserted.
    """

    __tablename__ = "withdrawal_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    action: Mapped[str] = mapped_column(String(10), nullable=False)  # WITHDRAW or REVERT
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, default=_now, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reverted_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    def __repr__(self) -> str:
        return f"<WithdrawalTransactionRow {self.id}: {self.action} {self.amount}>"


MODELS_BY_TABLE = {
    model.__tablename__: model
    for model in (TradeRow, UserSettingsRow, SmartWithdrawalSettingsRow, WithdrawalTransactionRow)
}
