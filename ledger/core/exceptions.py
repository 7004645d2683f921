"""
Ledger error taxonomy.

Every error is recoverable at the caller's boundary: the API layer turns
them into 4xx responses and nothing here is fatal to the process.
"""

from typing import Dict


class LedgerError(Exception):
    """Base exception for ledger business-rule violations."""

    status_code = 400

    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidAmount(LedgerError):
    """Non-positive, malformed or below-minimum amount. Raised before persistence."""

    status_code = 400


class InsufficientBalance(LedgerError):
    """Withdrawal request exceeds the seller's available balance."""

    status_code = 409


class InvalidTransition(LedgerError):
    """State change not allowed from the record's current status."""

    status_code = 409


class AlreadyConfirmed(InvalidTransition):
    """Revenue for the order was confirmed before."""


class NotFound(LedgerError):
    """Referenced seller, order, commission event or withdrawal does not exist."""

    status_code = 404
