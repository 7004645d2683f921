# Services module
from ledger.services.audit_service import AuditService
from ledger.services.commission_store import CommissionRecordStore
from ledger.services.withdrawal_store import WithdrawalRequestStore
from ledger.services.balance_calculator import BalanceBreakdown, calculate_balance, load_balance
from ledger.services.reconciliation_service import ReconciliationService, ReconciliationReport
from ledger.services.withdrawal_service import WithdrawalService
from ledger.services.revenue_confirmation_service import RevenueConfirmationService
from ledger.services.notification_service import (
    LedgerNotification,
    LoggingNotifier,
    WebhookNotifier,
    NotificationDispatcher,
)
from ledger.services.ledger_service import LedgerService

__all__ = [
    "AuditService",
    "CommissionRecordStore",
    "WithdrawalRequestStore",
    "BalanceBreakdown",
    "calculate_balance",
    "load_balance",
    "ReconciliationService",
    "ReconciliationReport",
    "WithdrawalService",
    "RevenueConfirmationService",
    # Notifications
    "LedgerNotification",
    "LoggingNotifier",
    "WebhookNotifier",
    "NotificationDispatcher",
    "LedgerService",
]
