"""API endpoints for withdrawal requests."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, status

from ledger.api.deps import Ledger
from ledger.models.withdrawal import WithdrawalStatus
from ledger.schemas.ledger import (
    WithdrawalCreate, WithdrawalResolve, WithdrawalResponse, WithdrawalListResponse,
)

# Mounted twice: seller-scoped paths and request-scoped paths.
seller_router = APIRouter()
router = APIRouter()


@seller_router.post(
    "/{seller_id}/withdrawals",
    response_model=WithdrawalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_withdrawal(seller_id: UUID, data: WithdrawalCreate, ledger: Ledger):
    """Request a payout; rejected with 409 when it exceeds the available balance."""
    return await ledger.request_withdrawal(seller_id, data.amount)


@seller_router.get("/{seller_id}/withdrawals", response_model=WithdrawalListResponse)
async def list_withdrawals(
    seller_id: UUID,
    ledger: Ledger,
    status: Optional[WithdrawalStatus] = None,
):
    requests = await ledger.list_withdrawals(seller_id, status=status)
    return WithdrawalListResponse(
        items=[WithdrawalResponse.model_validate(r) for r in requests],
        total=len(requests),
    )


@router.post("/{request_id}/resolve", response_model=WithdrawalResponse)
async def resolve_withdrawal(request_id: UUID, data: WithdrawalResolve, ledger: Ledger):
    """Mark a pending withdrawal COMPLETED or REJECTED."""
    return await ledger.resolve_withdrawal(
        request_id,
        data.outcome,
        note=data.note,
        payout_reference=data.payout_reference,
        performed_by=data.performed_by,
    )
