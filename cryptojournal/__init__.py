"""
CryptoJournal - Personal Crypto Trading Journal

Log trades, review profit and loss, and split profits between
reinvestment and withdrawals with a simple, fixed rule.

Derived numbers are recomputed from the stored trades every time.
"""

__version__ = "0.1.0"
