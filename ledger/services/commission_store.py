"""
Commission Record Store

Append-only persistence for CommissionEvent rows:
- append earned/reversed events
- query by seller (optionally by status/type) or by order
- confirm or void an existing event (status transitions only)

Nothing here commits; callers own the transaction.
"""

import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.enum_utils import get_enum_value
from ledger.core.exceptions import NotFound, InvalidTransition, AlreadyConfirmed
from ledger.core.money import parse_amount, ZERO
from ledger.models.commission import (
    CommissionEvent,
    CommissionType,
    CommissionStatus,
)

logger = logging.getLogger(__name__)

StatusArg = Optional[Union[CommissionStatus, str]]
TypeArg = Optional[Union[CommissionType, str]]


class CommissionRecordStore:
    """Store for commission events."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        seller_id: uuid.UUID,
        order_id: str,
        amount,
        type: Union[CommissionType, str] = CommissionType.EARNED,
        status: Union[CommissionStatus, str] = CommissionStatus.PENDING,
        description: Optional[str] = None,
    ) -> CommissionEvent:
        """
        Append a commission event.

        Raises InvalidAmount when amount is not a positive decimal.
        A VOIDED initial status is rejected: voiding is a transition.
        """
        amount = parse_amount(amount)
        status = get_enum_value(status)
        if status == CommissionStatus.VOIDED.value:
            raise InvalidTransition("Commission events cannot be created voided")

        now = datetime.now(timezone.utc)
        event = CommissionEvent(
            id=uuid.uuid4(),
            seller_id=seller_id,
            order_id=str(order_id),
            amount=amount,
            original_amount=amount,
            type=get_enum_value(type),
            status=status,
            description=description,
            created_at=now,
            confirmed_at=now if status == CommissionStatus.CONFIRMED.value else None,
        )
        self.db.add(event)
        await self.db.flush()

        logger.info(
            f"Commission {event.type}/{event.status} recorded: seller={seller_id} "
            f"order={order_id} amount={amount}"
        )
        return event

    async def get(self, event_id: uuid.UUID, for_update: bool = False) -> CommissionEvent:
        stmt = select(CommissionEvent).where(CommissionEvent.id == event_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        event = result.scalar_one_or_none()
        if event is None:
            raise NotFound(f"Commission event {event_id} not found", {"event_id": str(event_id)})
        return event

    async def list_for_seller(
        self,
        seller_id: uuid.UUID,
        status: StatusArg = None,
        type: TypeArg = None,
    ) -> List[CommissionEvent]:
        """All events for a seller, newest first, optionally filtered."""
        stmt = select(CommissionEvent).where(CommissionEvent.seller_id == seller_id)
        if status is not None:
            stmt = stmt.where(CommissionEvent.status == get_enum_value(status))
        if type is not None:
            stmt = stmt.where(CommissionEvent.type == get_enum_value(type))
        stmt = stmt.order_by(CommissionEvent.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_order(
        self,
        order_id: str,
        type: TypeArg = None,
        for_update: bool = False,
    ) -> List[CommissionEvent]:
        stmt = select(CommissionEvent).where(CommissionEvent.order_id == str(order_id))
        if type is not None:
            stmt = stmt.where(CommissionEvent.type == get_enum_value(type))
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        stmt = stmt.order_by(CommissionEvent.created_at.asc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def sum_amounts(
        self,
        seller_id: uuid.UUID,
        status: Union[CommissionStatus, str],
        type: Union[CommissionType, str],
    ) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(CommissionEvent.amount), 0))
            .where(
                CommissionEvent.seller_id == seller_id,
                CommissionEvent.status == get_enum_value(status),
                CommissionEvent.type == get_enum_value(type),
            )
        )
        total = result.scalar()
        return Decimal(str(total)) if total is not None else ZERO

    async def confirm(
        self,
        event: CommissionEvent,
        amount=None,
        confirmed_by: Optional[str] = None,
    ) -> CommissionEvent:
        """
        PENDING -> CONFIRMED, optionally replacing the amount with the
        amount actually collected.
        """
        if event.is_confirmed:
            raise AlreadyConfirmed(
                f"Commission for order {event.order_id} is already confirmed",
                {"event_id": str(event.id), "order_id": event.order_id},
            )
        if not event.can_transition_to(CommissionStatus.CONFIRMED.value):
            raise InvalidTransition(
                f"Cannot confirm commission in status {event.status}",
                {"event_id": str(event.id), "status": event.status},
            )

        if amount is not None:
            event.amount = parse_amount(amount, "confirmed_amount")
        event.status = CommissionStatus.CONFIRMED.value
        event.confirmed_at = datetime.now(timezone.utc)
        event.confirmed_by = confirmed_by
        await self.db.flush()

        logger.info(
            f"Commission confirmed: order={event.order_id} amount={event.amount} "
            f"(originally {event.original_amount})"
        )
        return event

    async def void(self, event: CommissionEvent, reason: Optional[str] = None) -> CommissionEvent:
        """PENDING|CONFIRMED -> VOIDED. The row stays for the audit trail."""
        if not event.can_transition_to(CommissionStatus.VOIDED.value):
            raise InvalidTransition(
                f"Cannot void commission in status {event.status}",
                {"event_id": str(event.id), "status": event.status},
            )

        event.status = CommissionStatus.VOIDED.value
        event.voided_at = datetime.now(timezone.utc)
        event.void_reason = reason
        await self.db.flush()

        logger.info(f"Commission voided: order={event.order_id} amount={event.amount} reason={reason}")
        return event

    async def confirm_by_id(self, event_id: uuid.UUID, amount=None, confirmed_by: Optional[str] = None) -> CommissionEvent:
        event = await self.get(event_id, for_update=True)
        return await self.confirm(event, amount=amount, confirmed_by=confirmed_by)

    async def void_by_id(self, event_id: uuid.UUID, reason: Optional[str] = None) -> CommissionEvent:
        event = await self.get(event_id, for_update=True)
        return await self.void(event, reason=reason)
