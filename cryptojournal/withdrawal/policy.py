"""
Smart withdrawal policy.

Decides how much profit may be taken out given the reinvestment share
and what the ledger says has already been withdrawn.
"""

from decimal import Decimal
from typing import Any, Iterable

from cryptojournal.core.entities import SmartWithdrawalSettings, WithdrawalAction, WithdrawalTransaction
from cryptojournal.core.errors import ValidationError
from cryptojournal.core.utils import to_decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def protected_amount(total_profit: Decimal, settings: SmartWithdrawalSettings) -> Decimal:
    """Share of profit not reserved for reinvestment. Never negative."""
    share = total_profit * (1 - settings.reinvest_percentage / HUNDRED)
    return max(ZERO, share)


def net_withdrawn(ledger: Iterable[WithdrawalTransaction]) -> Decimal:
    """Sum of withdrawals minus sum of reverts."""
    total = ZERO
    for entry in ledger:
        if entry.action == WithdrawalAction.WITHDRAW:
            total += entry.amount
        elif entry.action == WithdrawalAction.REVERT:
            total -= entry.amount
    return total


def available_to_withdraw(
    total_profit: Decimal,
    settings: SmartWithdrawalSettings,
    ledger: Iterable[WithdrawalTransaction],
) -> Decimal:
    """Amount that may be withdrawn now. Zero when the rule is disabled."""
    if not settings.enabled:
        return ZERO
    return max(ZERO, protected_amount(total_profit, settings) - net_withdrawn(ledger))


def validate_withdrawal(amount: Any, available: Decimal) -> Decimal:
    """
    Check a requested amount against what is available.

    Returns the amount as Decimal.
    Raises ValidationError naming the amount field.
    """
    try:
        value = to_decimal(amount)
    except ValueError:
        value = None

    if value is None or not value.is_finite() or value <= 0:
        raise ValidationError("amount", "Please enter a valid amount")

    if value > available:
        raise ValidationError("amount", f"Amount exceeds available withdrawal limit of {available:.2f} USD")

    return value
