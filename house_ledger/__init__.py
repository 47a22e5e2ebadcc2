"""Shared-expense ledger and settlement engine"""

__version__ = "1.0.0"
