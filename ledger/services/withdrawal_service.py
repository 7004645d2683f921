"""
Withdrawal Lifecycle Controller

State machine per request: PENDING -> COMPLETED | REJECTED.

- Create: amount must not exceed the available balance; the check and the
  insert run inside the seller critical section, and the cached balance is
  refreshed before the section is released.
- Complete: pending and completed withdrawals are both subtracted, so the
  total does not move; the cache is refreshed anyway to repair drift.
- Reject: the reserved amount returns to the available balance.

Every transition is audited and announced after commit.
"""

import uuid
import logging
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.enum_utils import get_enum_value
from ledger.core.exceptions import InsufficientBalance, InvalidAmount, InvalidTransition
from ledger.core.money import parse_amount, ZERO
from ledger.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from ledger.services.audit_service import AuditService
from ledger.services.balance_calculator import load_balance
from ledger.services.notification_service import LedgerNotification, NotificationDispatcher
from ledger.services.reconciliation_service import ReconciliationService
from ledger.services.seller_lock import seller_critical_section
from ledger.services.withdrawal_store import WithdrawalRequestStore

logger = logging.getLogger(__name__)


class WithdrawalService:
    """Orchestrates withdrawal requests and their resolution."""

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: Optional[NotificationDispatcher] = None,
        min_withdrawal_amount: Decimal = ZERO,
    ):
        self.db = db
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.min_withdrawal_amount = Decimal(str(min_withdrawal_amount))
        self.store = WithdrawalRequestStore(db)
        self.audit = AuditService(db)
        self.reconciliation = ReconciliationService(db, performed_by="withdrawal")

    async def request_withdrawal(self, seller_id: uuid.UUID, amount) -> WithdrawalRequest:
        """
        Reserve `amount` from the seller's available balance as a PENDING request.

        Raises:
            InvalidAmount: non-positive or below the minimum withdrawal amount
            NotFound: unknown seller
            InsufficientBalance: amount exceeds the available balance
        """
        amount = parse_amount(amount)
        if amount < self.min_withdrawal_amount:
            raise InvalidAmount(
                f"Minimum withdrawal amount is {self.min_withdrawal_amount}",
                {"amount": str(amount), "minimum": str(self.min_withdrawal_amount)},
            )

        async with seller_critical_section(self.db, seller_id) as seller:
            if not seller.is_active:
                raise InvalidTransition(
                    f"Seller {seller_id} is not active",
                    {"seller_id": str(seller_id)},
                )

            breakdown = await load_balance(self.db, seller_id)
            if amount > breakdown.available_balance:
                logger.info(
                    f"Withdrawal of {amount} refused for seller {seller_id}: "
                    f"available {breakdown.available_balance}"
                )
                raise InsufficientBalance(
                    f"Requested {amount} exceeds available balance {breakdown.available_balance}",
                    {
                        "requested": str(amount),
                        "available": str(breakdown.available_balance),
                    },
                )

            request = await self.store.create(seller_id, amount)
            await self.audit.log_withdrawal_transition(request, old_status=None)
            await self.reconciliation.refresh(seller)
            await self.db.commit()

        logger.info(f"Withdrawal {request.id} requested: seller={seller_id} amount={amount}")
        self._notify("WITHDRAWAL_REQUESTED", request)
        return request

    async def resolve_withdrawal(
        self,
        request_id: uuid.UUID,
        outcome: Union[WithdrawalStatus, str],
        note: Optional[str] = None,
        payout_reference: Optional[str] = None,
        performed_by: Optional[str] = None,
    ) -> WithdrawalRequest:
        """
        Move a PENDING request to COMPLETED or REJECTED exactly once.

        Raises InvalidTransition on a second resolution or a non-terminal outcome.
        """
        outcome = get_enum_value(outcome)
        # Seller id is immutable, so it is safe to read before locking
        request = await self.store.get(request_id)
        seller_id = request.seller_id

        async with seller_critical_section(self.db, seller_id) as seller:
            request = await self.store.get(request_id, for_update=True)
            old_status = request.status
            await self.store.resolve(request, outcome, note=note, payout_reference=payout_reference)
            await self.audit.log_withdrawal_transition(request, old_status, performed_by=performed_by)
            await self.reconciliation.refresh(seller)
            await self.db.commit()

        logger.info(f"Withdrawal {request.id} {old_status} -> {request.status}")
        self._notify(f"WITHDRAWAL_{request.status}", request)
        return request

    async def complete_withdrawal(self, request_id: uuid.UUID, payout_reference: Optional[str] = None, **kwargs) -> WithdrawalRequest:
        return await self.resolve_withdrawal(
            request_id, WithdrawalStatus.COMPLETED, payout_reference=payout_reference, **kwargs
        )

    async def reject_withdrawal(self, request_id: uuid.UUID, note: Optional[str] = None, **kwargs) -> WithdrawalRequest:
        return await self.resolve_withdrawal(request_id, WithdrawalStatus.REJECTED, note=note, **kwargs)

    def _notify(self, event: str, request: WithdrawalRequest) -> None:
        self.dispatcher.dispatch(
            LedgerNotification(
                event=event,
                seller_id=request.seller_id,
                entity_id=request.id,
                amount=request.amount,
                status=request.status,
                details={
                    "resolution_note": request.resolution_note,
                    "payout_reference": request.payout_reference,
                },
            )
        )
