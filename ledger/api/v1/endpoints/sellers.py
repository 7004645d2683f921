"""API endpoints for sellers, balances and commission history."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, status

from ledger.api.deps import Ledger
from ledger.models.commission import CommissionStatus, CommissionType
from ledger.schemas.ledger import (
    SellerCreate, SellerResponse, BalanceResponse,
    CommissionEventResponse, CommissionListResponse, CommissionSummaryResponse,
)

router = APIRouter()


@router.post("", response_model=SellerResponse, status_code=status.HTTP_201_CREATED)
async def register_seller(seller_in: SellerCreate, ledger: Ledger):
    """Register a seller with a zero balance."""
    return await ledger.register_seller(seller_in.name, email=seller_in.email)


@router.get("/{seller_id}", response_model=SellerResponse)
async def get_seller(seller_id: UUID, ledger: Ledger):
    """Seller with its cached balance."""
    return await ledger.get_seller(seller_id)


@router.get("/{seller_id}/balance", response_model=BalanceResponse)
async def get_balance(seller_id: UUID, ledger: Ledger):
    """Balance computed from the full commission and withdrawal history."""
    seller = await ledger.get_seller(seller_id)
    breakdown = await ledger.get_balance_breakdown(seller_id)
    return BalanceResponse(
        seller_id=seller_id,
        confirmed_earned=breakdown.confirmed_earned,
        confirmed_reversed=breakdown.confirmed_reversed,
        completed_withdrawals=breakdown.completed_withdrawals,
        pending_withdrawals=breakdown.pending_withdrawals,
        raw_balance=breakdown.raw_balance,
        available_balance=breakdown.available_balance,
        cached_balance=seller.available_commission,
        floor_engaged=breakdown.floor_engaged,
    )


@router.get("/{seller_id}/commissions", response_model=CommissionListResponse)
async def list_commissions(
    seller_id: UUID,
    ledger: Ledger,
    status: Optional[CommissionStatus] = None,
    type: Optional[CommissionType] = None,
):
    """Commission events for a seller, newest first."""
    events = await ledger.list_commissions(seller_id, status=status, type=type)
    return CommissionListResponse(
        items=[CommissionEventResponse.model_validate(e) for e in events],
        total=len(events),
    )


@router.get("/{seller_id}/commissions/summary", response_model=CommissionSummaryResponse)
async def get_commission_summary(seller_id: UUID, ledger: Ledger):
    summary = await ledger.get_commission_summary(seller_id)
    return CommissionSummaryResponse(seller_id=seller_id, **summary)
