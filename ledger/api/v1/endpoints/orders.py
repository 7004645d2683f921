"""API endpoints driven by order lifecycle events."""
from typing import Optional

from fastapi import APIRouter

from ledger.api.deps import Ledger
from ledger.schemas.ledger import (
    RevenueConfirmation, CommissionVoid, CommissionEventResponse, CommissionListResponse,
)

router = APIRouter()


@router.post("/{order_id}/confirm-revenue", response_model=CommissionEventResponse)
async def confirm_revenue(order_id: str, data: RevenueConfirmation, ledger: Ledger):
    """Confirm collected cash for an order. Confirming twice returns 409."""
    return await ledger.confirm_revenue(
        order_id,
        data.confirmed_amount,
        seller_id=data.seller_id,
        confirmed_by=data.confirmed_by,
    )


@router.post("/{order_id}/void-commission", response_model=CommissionListResponse)
async def void_order_commission(
    order_id: str,
    ledger: Ledger,
    data: Optional[CommissionVoid] = None,
):
    """Void commission of a cancelled or refunded order."""
    data = data or CommissionVoid()
    events = await ledger.void_order_commission(
        order_id, reason=data.reason, performed_by=data.performed_by
    )
    return CommissionListResponse(
        items=[CommissionEventResponse.model_validate(e) for e in events],
        total=len(events),
    )
