"""Ledger ORM models. Importing this package registers every table on Base.metadata."""

from ledger.models.seller import Seller
from ledger.models.commission import (
    CommissionEvent,
    CommissionType,
    CommissionStatus,
    COMMISSION_TRANSITIONS,
)
from ledger.models.withdrawal import (
    WithdrawalRequest,
    WithdrawalStatus,
    TERMINAL_WITHDRAWAL_STATUSES,
)
from ledger.models.audit_log import AuditLog

__all__ = [
    "Seller",
    "CommissionEvent",
    "CommissionType",
    "CommissionStatus",
    "COMMISSION_TRANSITIONS",
    "WithdrawalRequest",
    "WithdrawalStatus",
    "TERMINAL_WITHDRAWAL_STATUSES",
    "AuditLog",
]
