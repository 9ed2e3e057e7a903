"""
Persistence gateway interface.

A gateway stores plain rows (dicts keyed by column name) in four tables:
trades, user_settings, smart_withdrawal_settings, withdrawal_transactions.
Failures raise GatewayError subclasses carrying the backend's error code.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Row = Dict[str, Any]

TRADES = "trades"
USER_SETTINGS = "user_settings"
SMART_WITHDRAWAL_SETTINGS = "smart_withdrawal_settings"
WITHDRAWAL_TRANSACTIONS = "withdrawal_transactions"

ALL_TABLES = (TRADES, USER_SETTINGS, SMART_WITHDRAWAL_SETTINGS, WITHDRAWAL_TRANSACTIONS)


class Gateway(ABC):
    """Table CRUD against a remote or local store."""

    @abstractmethod
    def select(
        self,
        table: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        """All rows matching every equality filter."""

    @abstractmethod
    def select_one(self, table: str, filters: Dict[str, Any]) -> Row:
        """
        Exactly one row.

        Raises RowNotFoundError when nothing matches.
        """

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        """Insert and return the stored row, with store-assigned fields."""

    @abstractmethod
    def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        """Update by id. Returns None when the id does not exist."""

    @abstractmethod
    def delete(self, table: str, row_id: str) -> bool:
        """Delete by id. Returns False when the id does not exist."""

    @abstractmethod
    def upsert(self, table: str, row: Row, on_conflict: str) -> Row:
        """Insert, or replace the row sharing the on_conflict column value."""

    @abstractmethod
    def ping(self, table: str) -> None:
        """Raise if the table cannot be read."""
