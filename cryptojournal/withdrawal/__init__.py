"""
Smart withdrawal module for CryptoJournal.

Handles the profit-splitting policy and the withdrawal ledger workflow.
"""

from cryptojournal.withdrawal.policy import available_to_withdraw, validate_withdrawal
from cryptojournal.withdrawal.service import WithdrawalService, WithdrawalStatus

__all__ = ["available_to_withdraw", "validate_withdrawal", "WithdrawalService", "WithdrawalStatus"]
