"""
Balance Calculator

The authoritative definition of a seller's available balance:

    raw       = confirmed earned - confirmed reversed - completed withdrawals - pending withdrawals
    available = max(raw, 0)

Pending withdrawals are subtracted up front so two requests cannot jointly
exceed the confirmed total. The floor hides data problems, so the breakdown
reports floor_engaged for reconciliation to flag.
"""

import uuid
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.money import quantize, ZERO
from ledger.models.commission import CommissionType, CommissionStatus
from ledger.models.withdrawal import WithdrawalStatus
from ledger.services.commission_store import CommissionRecordStore
from ledger.services.withdrawal_store import WithdrawalRequestStore


@dataclass(frozen=True)
class BalanceBreakdown:
    """Every component of the balance, plus the raw and floored results."""
    confirmed_earned: Decimal
    confirmed_reversed: Decimal
    completed_withdrawals: Decimal
    pending_withdrawals: Decimal
    raw_balance: Decimal
    available_balance: Decimal

    @property
    def floor_engaged(self) -> bool:
        return self.raw_balance < ZERO

    @property
    def net_confirmed_commission(self) -> Decimal:
        return self.confirmed_earned - self.confirmed_reversed

    def as_dict(self) -> Dict[str, str]:
        data = {k: str(v) for k, v in asdict(self).items()}
        data["floor_engaged"] = self.floor_engaged
        return data


def calculate_balance(
    confirmed_earned: Decimal,
    confirmed_reversed: Decimal = ZERO,
    completed_withdrawals: Decimal = ZERO,
    pending_withdrawals: Decimal = ZERO,
) -> BalanceBreakdown:
    """Pure balance arithmetic; no I/O."""
    raw = quantize(
        Decimal(confirmed_earned)
        - Decimal(confirmed_reversed)
        - Decimal(completed_withdrawals)
        - Decimal(pending_withdrawals)
    )
    return BalanceBreakdown(
        confirmed_earned=quantize(Decimal(confirmed_earned)),
        confirmed_reversed=quantize(Decimal(confirmed_reversed)),
        completed_withdrawals=quantize(Decimal(completed_withdrawals)),
        pending_withdrawals=quantize(Decimal(pending_withdrawals)),
        raw_balance=raw,
        available_balance=raw if raw > ZERO else ZERO,
    )


async def load_balance(db: AsyncSession, seller_id: uuid.UUID) -> BalanceBreakdown:
    """Aggregate the stores for one seller and run the calculation."""
    commissions = CommissionRecordStore(db)
    withdrawals = WithdrawalRequestStore(db)

    confirmed_earned = await commissions.sum_amounts(
        seller_id, CommissionStatus.CONFIRMED, CommissionType.EARNED
    )
    confirmed_reversed = await commissions.sum_amounts(
        seller_id, CommissionStatus.CONFIRMED, CommissionType.REVERSED
    )
    completed = await withdrawals.sum_amounts(seller_id, WithdrawalStatus.COMPLETED)
    pending = await withdrawals.sum_amounts(seller_id, WithdrawalStatus.PENDING)

    return calculate_balance(
        confirmed_earned=confirmed_earned,
        confirmed_reversed=confirmed_reversed,
        completed_withdrawals=completed,
        pending_withdrawals=pending,
    )
