"""
Withdrawal workflow.

Loads the owner's rule and ledger, applies the policy and appends
ledger entries. Reverts never delete: they append an offsetting REVERT
entry pointing at the withdrawal they cancel.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List

from cryptojournal.core.entities import SmartWithdrawalSettings, WithdrawalAction, WithdrawalTransaction
from cryptojournal.core.errors import ValidationError
from cryptojournal.journal.settings import SettingsRepository
from cryptojournal.journal.withdrawals import WithdrawalLedger
from cryptojournal.withdrawal.policy import (
    ZERO,
    available_to_withdraw,
    net_withdrawn,
    protected_amount,
    validate_withdrawal,
)

logger = logging.getLogger(__name__)


@dataclass
class WithdrawalStatus:
    """Snapshot of the owner's withdrawal position."""

    settings: SmartWithdrawalSettings
    total_profit: Decimal
    protected: Decimal
    net_withdrawn: Decimal
    available: Decimal
    ledger: List[WithdrawalTransaction] = field(default_factory=list)

    @property
    def reinvested(self) -> Decimal:
        """Part of positive profit kept in the account."""
        return max(ZERO, self.total_profit) - self.protected


def describe_withdrawal(amount: Decimal) -> str:
    return f"Withdrawal of {amount:.2f} USD"


class WithdrawalService:
    """Request and revert withdrawals for one store."""

    def __init__(self, settings_repo: SettingsRepository, ledger: WithdrawalLedger):
        self.settings_repo = settings_repo
        self.ledger = ledger

    def status(self, owner_id: str, total_profit: Decimal) -> WithdrawalStatus:
        settings = self.settings_repo.load_withdrawal_settings(owner_id)
        entries = self.ledger.list_for_owner(owner_id)

        return WithdrawalStatus(
            settings=settings,
            total_profit=total_profit,
            protected=protected_amount(total_profit, settings) if settings.enabled else ZERO,
            net_withdrawn=net_withdrawn(entries),
            available=available_to_withdraw(total_profit, settings, entries),
            ledger=entries,
        )

    def request_withdrawal(self, owner_id: str, amount: Any, total_profit: Decimal) -> WithdrawalTransaction:
        """
        Withdraw an amount if the policy allows it.

        The ledger is re-read first so the limit reflects every earlier
        entry. A rejected request writes nothing.
        """
        if not owner_id:
            raise ValidationError("owner_id", "Please sign in to record withdrawals")

        current = self.status(owner_id, total_profit)
        if not current.settings.enabled:
            raise ValidationError("enabled", "Smart withdrawal is disabled")

        try:
            value = validate_withdrawal(amount, current.available)
        except ValidationError as e:
            logger.warning(f"Withdrawal of {amount} rejected for {owner_id}: {e.message}")
            raise

        entry = self.ledger.append(
            WithdrawalTransaction(
                owner_id=owner_id,
                amount=value,
                action=WithdrawalAction.WITHDRAW,
                description=describe_withdrawal(value),
            )
        )
        logger.info(f"Withdrew {value} for {owner_id} (available was {current.available})")
        return entry

    def revert_withdrawal(self, owner_id: str, transaction_id: str) -> WithdrawalTransaction:
        """
        Cancel a withdrawal by appending a matching REVERT entry.

        Raises ValidationError for unknown ids, REVERT entries and
        withdrawals that were already reverted.
        """
        entries = self.ledger.list_for_owner(owner_id)
        target = next((e for e in entries if e.id == transaction_id), None)

        if target is None:
            raise ValidationError("transaction_id", f"No withdrawal {transaction_id}")
        if target.action != WithdrawalAction.WITHDRAW:
            raise ValidationError("transaction_id", "Only withdrawals can be reverted")
        if any(e.reverted_id == transaction_id for e in entries):
            raise ValidationError("transaction_id", "Withdrawal was already reverted")

        entry = self.ledger.append(
            WithdrawalTransaction(
                owner_id=owner_id,
                amount=target.amount,
                action=WithdrawalAction.REVERT,
                description=f"Revert of withdrawal of {target.amount:.2f} USD",
                reverted_id=target.id,
            )
        )
        logger.info(f"Reverted withdrawal {transaction_id} for {owner_id}")
        return entry
