"""
Revenue Confirmation Handler

An operator confirms that cash collected for an order (cash on delivery)
has actually arrived. The order's EARNED commission moves PENDING ->
CONFIRMED using the confirmed amount, which may be lower than the amount
originally earned. Confirming twice raises AlreadyConfirmed.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.exceptions import NotFound, InvalidTransition, AlreadyConfirmed
from ledger.core.money import parse_amount
from ledger.models.commission import CommissionEvent, CommissionType, CommissionStatus
from ledger.services.audit_service import AuditService
from ledger.services.commission_store import CommissionRecordStore
from ledger.services.reconciliation_service import ReconciliationService
from ledger.services.seller_lock import seller_critical_section

logger = logging.getLogger(__name__)


class RevenueConfirmationService:
    """Turns earned order revenue into confirmed commission."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = CommissionRecordStore(db)
        self.audit = AuditService(db)
        self.reconciliation = ReconciliationService(db, performed_by="revenue_confirmation")

    async def _earned_events(self, order_id: str, for_update: bool = False):
        return await self.store.list_for_order(order_id, type=CommissionType.EARNED, for_update=for_update)

    async def confirm_revenue(
        self,
        order_id: str,
        confirmed_amount,
        seller_id: Optional[uuid.UUID] = None,
        confirmed_by: Optional[str] = None,
    ) -> CommissionEvent:
        """
        Confirm the order's commission with the amount actually collected.

        Without an existing event, a CONFIRMED event is created when seller_id
        is given; otherwise NotFound.

        Raises:
            InvalidAmount: confirmed_amount not a positive decimal
            AlreadyConfirmed: the order's revenue was confirmed before
            InvalidTransition: the order's commission was voided, or seller_id
                names a different seller than the order's commission
            NotFound: no commission for the order and no seller given
        """
        confirmed_amount = parse_amount(confirmed_amount, "confirmed_amount")
        order_id = str(order_id)

        events = await self._earned_events(order_id)
        if events:
            if seller_id is not None and str(seller_id) != str(events[0].seller_id):
                raise InvalidTransition(
                    f"Order {order_id} belongs to a different seller",
                    {
                        "order_id": order_id,
                        "seller_id": str(seller_id),
                        "order_seller_id": str(events[0].seller_id),
                    },
                )
            seller_id = events[0].seller_id
        elif seller_id is None:
            raise NotFound(
                f"No commission recorded for order {order_id}",
                {"order_id": order_id},
            )

        async with seller_critical_section(self.db, seller_id) as seller:
            # Re-read under the lock: a concurrent confirmation may have won
            events = await self._earned_events(order_id, for_update=True)
            event = self._select_event(order_id, events)

            if event is None:
                event = await self.store.append(
                    seller_id,
                    order_id,
                    confirmed_amount,
                    type=CommissionType.EARNED,
                    status=CommissionStatus.CONFIRMED,
                    description=f"Revenue confirmed for order {order_id}",
                )
                event.confirmed_by = confirmed_by
                old_status = None
            else:
                old_status = event.status
                await self.store.confirm(event, amount=confirmed_amount, confirmed_by=confirmed_by)

            await self.audit.log_commission_transition(
                event, old_status or "NEW", performed_by=confirmed_by
            )
            await self.reconciliation.refresh(seller)
            await self.db.commit()

        logger.info(
            f"Revenue confirmed for order {order_id}: seller={seller_id} amount={confirmed_amount}"
        )
        return event

    @staticmethod
    def _select_event(order_id: str, events) -> Optional[CommissionEvent]:
        """Pick the event to confirm, enforcing idempotency."""
        if not events:
            return None

        for event in events:
            if event.is_confirmed:
                raise AlreadyConfirmed(
                    f"Revenue for order {order_id} is already confirmed",
                    {"order_id": order_id, "event_id": str(event.id)},
                )

        pending = [e for e in events if e.status == CommissionStatus.PENDING.value]
        if not pending:
            raise InvalidTransition(
                f"Commission for order {order_id} was voided",
                {"order_id": order_id},
            )
        return pending[0]
