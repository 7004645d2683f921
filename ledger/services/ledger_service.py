"""
Ledger Service

Entry point used by the surrounding order/admin system:
- sellers: register, read cached and computed balances
- commissions: record earned revenue, confirm COD revenue, void on
  cancellation, record reversals, history and summary
- withdrawals: request, resolve, history
- reconciliation: one seller or all

Every operation that changes what the balance calculator returns refreshes
the seller's cached balance inside the seller critical section.
"""

import uuid
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.exceptions import NotFound, InvalidTransition
from ledger.core.money import ZERO
from ledger.models.commission import CommissionEvent, CommissionType, CommissionStatus
from ledger.models.seller import Seller
from ledger.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from ledger.services.audit_service import AuditService
from ledger.services.balance_calculator import BalanceBreakdown, load_balance
from ledger.services.commission_store import CommissionRecordStore
from ledger.services.notification_service import NotificationDispatcher
from ledger.services.reconciliation_service import ReconciliationService, ReconciliationReport
from ledger.services.revenue_confirmation_service import RevenueConfirmationService
from ledger.services.seller_lock import seller_critical_section
from ledger.services.withdrawal_service import WithdrawalService
from ledger.services.withdrawal_store import WithdrawalRequestStore

logger = logging.getLogger(__name__)


class LedgerService:
    """Facade over the commission ledger components."""

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: Optional[NotificationDispatcher] = None,
        min_withdrawal_amount: Decimal = ZERO,
    ):
        self.db = db
        self.commissions = CommissionRecordStore(db)
        self.withdrawal_store = WithdrawalRequestStore(db)
        self.withdrawals = WithdrawalService(
            db, dispatcher=dispatcher, min_withdrawal_amount=min_withdrawal_amount
        )
        self.revenue = RevenueConfirmationService(db)
        self.reconciliation = ReconciliationService(db)
        self.audit = AuditService(db)

    # ========================================================================
    # Sellers
    # ========================================================================

    async def register_seller(self, name: str, email: Optional[str] = None) -> Seller:
        seller = Seller(id=uuid.uuid4(), name=name, email=email, available_commission=ZERO)
        self.db.add(seller)
        await self.db.commit()
        logger.info(f"Seller registered: {seller.id} ({name})")
        return seller

    async def get_seller(self, seller_id: uuid.UUID) -> Seller:
        result = await self.db.execute(
            select(Seller)
            .where(Seller.id == seller_id)
            .execution_options(populate_existing=True)
        )
        seller = result.scalar_one_or_none()
        if seller is None:
            raise NotFound(f"Seller {seller_id} not found", {"seller_id": str(seller_id)})
        return seller

    async def get_balance_breakdown(self, seller_id: uuid.UUID) -> BalanceBreakdown:
        await self.get_seller(seller_id)
        return await load_balance(self.db, seller_id)

    async def get_available_balance(self, seller_id: uuid.UUID) -> Decimal:
        """Authoritative available balance, computed from the full history."""
        breakdown = await self.get_balance_breakdown(seller_id)
        return breakdown.available_balance

    # ========================================================================
    # Commissions
    # ========================================================================

    async def record_earned_commission(
        self,
        seller_id: uuid.UUID,
        order_id: str,
        amount,
        confirmed: bool = False,
        description: Optional[str] = None,
    ) -> CommissionEvent:
        """
        Record commission for an order whose revenue became eligible.

        Prepaid orders pass confirmed=True (funds already collected); cash on
        delivery orders stay PENDING until confirm_revenue. One live EARNED
        event per order: recording again raises InvalidTransition.
        """
        order_id = str(order_id)
        status = CommissionStatus.CONFIRMED if confirmed else CommissionStatus.PENDING

        async with seller_critical_section(self.db, seller_id) as seller:
            existing = await self.commissions.list_for_order(order_id, type=CommissionType.EARNED)
            live = [e for e in existing if not e.is_voided]
            if live:
                raise InvalidTransition(
                    f"Commission already recorded for order {order_id}",
                    {"order_id": order_id, "event_id": str(live[0].id), "status": live[0].status},
                )

            event = await self.commissions.append(
                seller_id,
                order_id,
                amount,
                type=CommissionType.EARNED,
                status=status,
                description=description or f"Commission for order {order_id}",
            )
            await self.reconciliation.refresh(seller)
            await self.db.commit()
        return event

    async def record_reversal(
        self,
        seller_id: uuid.UUID,
        order_id: str,
        amount,
        description: Optional[str] = None,
    ) -> CommissionEvent:
        """Claw back confirmed commission (refund after confirmation)."""
        order_id = str(order_id)
        async with seller_critical_section(self.db, seller_id) as seller:
            event = await self.commissions.append(
                seller_id,
                order_id,
                amount,
                type=CommissionType.REVERSED,
                status=CommissionStatus.CONFIRMED,
                description=description or f"Commission reversed for order {order_id}",
            )
            await self.reconciliation.refresh(seller)
            await self.db.commit()
        return event

    async def confirm_revenue(
        self,
        order_id: str,
        confirmed_amount,
        seller_id: Optional[uuid.UUID] = None,
        confirmed_by: Optional[str] = None,
    ) -> CommissionEvent:
        return await self.revenue.confirm_revenue(
            order_id, confirmed_amount, seller_id=seller_id, confirmed_by=confirmed_by
        )

    async def void_order_commission(
        self,
        order_id: str,
        reason: Optional[str] = None,
        performed_by: Optional[str] = None,
    ) -> List[CommissionEvent]:
        """
        Void every live EARNED event of a cancelled or refunded order.

        Raises NotFound when the order has no commission and
        InvalidTransition when it was already voided.
        """
        order_id = str(order_id)
        events = await self.commissions.list_for_order(order_id, type=CommissionType.EARNED)
        if not events:
            raise NotFound(f"No commission recorded for order {order_id}", {"order_id": order_id})

        seller_id = events[0].seller_id
        async with seller_critical_section(self.db, seller_id) as seller:
            events = await self.commissions.list_for_order(
                order_id, type=CommissionType.EARNED, for_update=True
            )
            live = [e for e in events if not e.is_voided]
            if not live:
                raise InvalidTransition(
                    f"Commission for order {order_id} is already voided",
                    {"order_id": order_id},
                )

            for event in live:
                old_status = event.status
                await self.commissions.void(event, reason=reason)
                await self.audit.log_commission_transition(event, old_status, performed_by=performed_by)

            await self.reconciliation.refresh(seller)
            await self.db.commit()

        logger.info(f"Voided {len(live)} commission event(s) for order {order_id}")
        return live

    async def list_commissions(
        self,
        seller_id: uuid.UUID,
        status: Optional[Union[CommissionStatus, str]] = None,
        type: Optional[Union[CommissionType, str]] = None,
    ) -> List[CommissionEvent]:
        await self.get_seller(seller_id)
        return await self.commissions.list_for_seller(seller_id, status=status, type=type)

    async def get_commission_summary(self, seller_id: uuid.UUID) -> Dict[str, Decimal]:
        """Totals per type and status, plus the computed balance."""
        breakdown = await self.get_balance_breakdown(seller_id)

        result = await self.db.execute(
            select(
                CommissionEvent.type,
                CommissionEvent.status,
                func.coalesce(func.sum(CommissionEvent.amount), 0),
                func.count(CommissionEvent.id),
            )
            .where(CommissionEvent.seller_id == seller_id)
            .group_by(CommissionEvent.type, CommissionEvent.status)
        )

        totals = {
            "pending_amount": ZERO,
            "confirmed_amount": ZERO,
            "voided_amount": ZERO,
            "reversed_amount": ZERO,
        }
        counts = {"pending": 0, "confirmed": 0, "voided": 0, "reversed": 0}
        for type_, status, amount, count in result.all():
            amount = Decimal(str(amount))
            if type_ == CommissionType.REVERSED.value:
                if status == CommissionStatus.CONFIRMED.value:
                    totals["reversed_amount"] += amount
                    counts["reversed"] += count
                continue
            key = status.lower()
            totals[f"{key}_amount"] += amount
            counts[key] += count

        return {
            **totals,
            "counts": counts,
            "total_withdrawn": breakdown.completed_withdrawals,
            "pending_withdrawals": breakdown.pending_withdrawals,
            "available_balance": breakdown.available_balance,
        }

    # ========================================================================
    # Withdrawals
    # ========================================================================

    async def request_withdrawal(self, seller_id: uuid.UUID, amount) -> WithdrawalRequest:
        return await self.withdrawals.request_withdrawal(seller_id, amount)

    async def resolve_withdrawal(
        self,
        request_id: uuid.UUID,
        outcome: Union[WithdrawalStatus, str],
        note: Optional[str] = None,
        payout_reference: Optional[str] = None,
        performed_by: Optional[str] = None,
    ) -> WithdrawalRequest:
        return await self.withdrawals.resolve_withdrawal(
            request_id,
            outcome,
            note=note,
            payout_reference=payout_reference,
            performed_by=performed_by,
        )

    async def list_withdrawals(
        self,
        seller_id: uuid.UUID,
        status: Optional[Union[WithdrawalStatus, str]] = None,
    ) -> List[WithdrawalRequest]:
        await self.get_seller(seller_id)
        return await self.withdrawal_store.list_for_seller(seller_id, status=status)

    # ========================================================================
    # Reconciliation
    # ========================================================================

    async def reconcile(self, seller_id: Optional[uuid.UUID] = None) -> ReconciliationReport:
        return await self.reconciliation.reconcile(seller_id)
