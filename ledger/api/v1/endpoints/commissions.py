"""API endpoints for recording commission events."""
from fastapi import APIRouter, status

from ledger.api.deps import Ledger
from ledger.schemas.ledger import (
    CommissionRecordCreate, CommissionReversalCreate, CommissionEventResponse,
)

router = APIRouter()


@router.post("", response_model=CommissionEventResponse, status_code=status.HTTP_201_CREATED)
async def record_earned_commission(data: CommissionRecordCreate, ledger: Ledger):
    """
    Record commission earned on an order.

    Prepaid orders are recorded with confirmed=true; cash on delivery
    orders stay pending until revenue is confirmed.
    """
    return await ledger.record_earned_commission(
        data.seller_id,
        data.order_id,
        data.amount,
        confirmed=data.confirmed,
        description=data.description,
    )


@router.post("/reversals", response_model=CommissionEventResponse, status_code=status.HTTP_201_CREATED)
async def record_reversal(data: CommissionReversalCreate, ledger: Ledger):
    """Claw back commission after a refund of a confirmed order."""
    return await ledger.record_reversal(
        data.seller_id,
        data.order_id,
        data.amount,
        description=data.description,
    )
