"""
Withdrawal ledger repository.

The ledger is append-only: entries are inserted and read, never
updated or deleted.
"""

import logging
from typing import List, Optional

from cryptojournal.core.entities import WithdrawalAction, WithdrawalTransaction
from cryptojournal.core.errors import GatewayError, ValidationError
from cryptojournal.core.utils import parse_timestamp, to_decimal
from cryptojournal.store.base import WITHDRAWAL_TRANSACTIONS, Gateway, Row

logger = logging.getLogger(__name__)


def transaction_to_row(transaction: WithdrawalTransaction) -> Row:
    """Row for insert. The timestamp is assigned by the store."""
    row = {
        "user_id": transaction.owner_id,
        "amount": str(transaction.amount),
        "action": transaction.action.value,
        "description": transaction.description,
    }
    if transaction.reverted_id:
        row["reverted_id"] = transaction.reverted_id
    return row


def row_to_transaction(row: Row) -> WithdrawalTransaction:
    return WithdrawalTransaction(
        id=row.get("id"),
        owner_id=row["user_id"],
        amount=to_decimal(row["amount"]),
        action=WithdrawalAction(row["action"]),
        description=row.get("description") or "",
        reverted_id=row.get("reverted_id"),
        timestamp=parse_timestamp(row.get("timestamp")),
    )


class WithdrawalLedger:
    """Reads and appends withdrawal ledger entries."""

    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    def list_for_owner(self, owner_id: Optional[str]) -> List[WithdrawalTransaction]:
        """All entries of the owner, newest first."""
        if not owner_id:
            return []

        try:
            rows = self.gateway.select(
                WITHDRAWAL_TRANSACTIONS,
                {"user_id": owner_id},
                order_by="timestamp",
                descending=True,
            )
        except GatewayError as e:
            logger.error(f"Error fetching withdrawal transactions: {e}")
            raise

        return [row_to_transaction(row) for row in rows]

    def get(self, transaction_id: str) -> Optional[WithdrawalTransaction]:
        rows = self.gateway.select(WITHDRAWAL_TRANSACTIONS, {"id": transaction_id})
        return row_to_transaction(rows[0]) if rows else None

    def append(self, transaction: WithdrawalTransaction) -> WithdrawalTransaction:
        if not transaction.owner_id:
            raise ValidationError("owner_id", "Please sign in to record withdrawals")

        try:
            stored = self.gateway.insert(WITHDRAWAL_TRANSACTIONS, transaction_to_row(transaction))
        except GatewayError as e:
            logger.error(f"Error adding withdrawal transaction: {e}")
            raise

        entry = row_to_transaction(stored)
        logger.info(f"Ledger entry {entry.id}: {entry.action.value} {entry.amount}")
        return entry
