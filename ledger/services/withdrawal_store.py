"""
Withdrawal Request Store

Persistence for WithdrawalRequest rows. Resolution happens exactly once;
a second resolution raises InvalidTransition instead of overwriting.
Nothing here commits; callers own the transaction.
"""

import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.enum_utils import get_enum_value, to_enum
from ledger.core.exceptions import NotFound, InvalidTransition
from ledger.core.money import parse_amount, ZERO
from ledger.models.withdrawal import (
    WithdrawalRequest,
    WithdrawalStatus,
    TERMINAL_WITHDRAWAL_STATUSES,
)

logger = logging.getLogger(__name__)


class WithdrawalRequestStore:
    """Store for withdrawal requests."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, seller_id: uuid.UUID, amount) -> WithdrawalRequest:
        amount = parse_amount(amount)
        request = WithdrawalRequest(
            id=uuid.uuid4(),
            seller_id=seller_id,
            amount=amount,
            status=WithdrawalStatus.PENDING.value,
            requested_at=datetime.now(timezone.utc),
        )
        self.db.add(request)
        await self.db.flush()
        return request

    async def get(self, request_id: uuid.UUID, for_update: bool = False) -> WithdrawalRequest:
        stmt = select(WithdrawalRequest).where(WithdrawalRequest.id == request_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFound(f"Withdrawal request {request_id} not found", {"request_id": str(request_id)})
        return request

    async def list_for_seller(
        self,
        seller_id: uuid.UUID,
        status: Optional[Union[WithdrawalStatus, str]] = None,
    ) -> List[WithdrawalRequest]:
        """All requests for a seller, newest first."""
        stmt = select(WithdrawalRequest).where(WithdrawalRequest.seller_id == seller_id)
        if status is not None:
            stmt = stmt.where(WithdrawalRequest.status == get_enum_value(status))
        stmt = stmt.order_by(WithdrawalRequest.requested_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def sum_amounts(
        self,
        seller_id: uuid.UUID,
        status: Union[WithdrawalStatus, str],
    ) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(WithdrawalRequest.amount), 0))
            .where(
                WithdrawalRequest.seller_id == seller_id,
                WithdrawalRequest.status == get_enum_value(status),
            )
        )
        total = result.scalar()
        return Decimal(str(total)) if total is not None else ZERO

    async def resolve(
        self,
        request: WithdrawalRequest,
        outcome: Union[WithdrawalStatus, str],
        note: Optional[str] = None,
        payout_reference: Optional[str] = None,
    ) -> WithdrawalRequest:
        """
        PENDING -> COMPLETED | REJECTED.

        Raises InvalidTransition when the request is already terminal or the
        outcome is not a terminal status.
        """
        outcome = get_enum_value(to_enum(outcome, WithdrawalStatus) or outcome)
        if outcome not in TERMINAL_WITHDRAWAL_STATUSES:
            raise InvalidTransition(
                f"Invalid withdrawal outcome: {outcome}",
                {"outcome": outcome, "allowed": sorted(TERMINAL_WITHDRAWAL_STATUSES)},
            )
        if request.is_terminal:
            raise InvalidTransition(
                f"Withdrawal request {request.id} is already {request.status}",
                {"request_id": str(request.id), "status": request.status},
            )

        request.status = outcome
        request.resolved_at = datetime.now(timezone.utc)
        request.resolution_note = note
        request.payout_reference = payout_reference
        await self.db.flush()
        return request
