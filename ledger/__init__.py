"""Seller commission ledger and withdrawal reconciliation service."""

__version__ = "1.0.0"
