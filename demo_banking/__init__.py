"""
Demo Banking Ledger

A small retail banking backend: registration and login, deposits, withdrawals,
transfers, receipts, and an admin console. All amounts use Decimal.
"""

__version__ = "1.0.0"
