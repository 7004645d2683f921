"""Pydantic schemas for the commission ledger API."""
from datetime import datetime
from typing import Optional, List, Dict
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from ledger.schemas.base import BaseResponseSchema
from ledger.core.enum_utils import normalize_to_uppercase, VALID_WITHDRAWAL_STATUSES
from ledger.models.commission import CommissionStatus, CommissionType
from ledger.models.withdrawal import WithdrawalStatus


# ==================== Seller Schemas ====================

class SellerCreate(BaseModel):
    """Schema for registering a seller."""
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=255)


class SellerResponse(BaseResponseSchema):
    """Response schema for Seller."""
    id: UUID
    name: str
    email: Optional[str] = None
    is_active: bool
    available_commission: Decimal
    balance_reconciled_at: Optional[datetime] = None
    created_at: datetime


class BalanceResponse(BaseModel):
    """Computed balance breakdown."""
    seller_id: UUID
    confirmed_earned: Decimal
    confirmed_reversed: Decimal
    completed_withdrawals: Decimal
    pending_withdrawals: Decimal
    raw_balance: Decimal
    available_balance: Decimal
    cached_balance: Decimal
    floor_engaged: bool


# ==================== Commission Schemas ====================

# Sign and precision of amounts are checked by the service layer,
# so non-positive values surface as InvalidAmount.

class CommissionRecordCreate(BaseModel):
    """Schema for recording earned commission."""
    seller_id: UUID
    order_id: str = Field(..., min_length=1, max_length=100)
    amount: Decimal
    confirmed: bool = False
    description: Optional[str] = None


class CommissionReversalCreate(BaseModel):
    """Schema for recording a commission reversal."""
    seller_id: UUID
    order_id: str = Field(..., min_length=1, max_length=100)
    amount: Decimal
    description: Optional[str] = None


class RevenueConfirmation(BaseModel):
    """Operator confirmation of collected cash for an order."""
    confirmed_amount: Decimal
    seller_id: Optional[UUID] = None
    confirmed_by: Optional[str] = Field(None, max_length=100)


class CommissionVoid(BaseModel):
    reason: Optional[str] = None
    performed_by: Optional[str] = Field(None, max_length=100)


class CommissionEventResponse(BaseResponseSchema):
    """Response schema for CommissionEvent."""
    id: UUID
    seller_id: UUID
    order_id: str
    amount: Decimal
    original_amount: Decimal
    type: CommissionType
    status: CommissionStatus
    description: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    confirmed_by: Optional[str] = None
    voided_at: Optional[datetime] = None
    void_reason: Optional[str] = None
    created_at: datetime


class CommissionListResponse(BaseModel):
    items: List[CommissionEventResponse]
    total: int


class CommissionSummaryResponse(BaseModel):
    """Commission totals for a seller dashboard."""
    seller_id: UUID
    pending_amount: Decimal
    confirmed_amount: Decimal
    voided_amount: Decimal
    reversed_amount: Decimal
    counts: Dict[str, int]
    total_withdrawn: Decimal
    pending_withdrawals: Decimal
    available_balance: Decimal


# ==================== Withdrawal Schemas ====================

class WithdrawalCreate(BaseModel):
    """Schema for requesting a withdrawal."""
    amount: Decimal


class WithdrawalResolve(BaseModel):
    """Schema for resolving a withdrawal."""
    outcome: WithdrawalStatus
    note: Optional[str] = None
    payout_reference: Optional[str] = Field(None, max_length=100)
    performed_by: Optional[str] = Field(None, max_length=100)

    @field_validator('outcome', mode='before')
    @classmethod
    def normalize_outcome(cls, v):
        return normalize_to_uppercase(v, VALID_WITHDRAWAL_STATUSES)


class WithdrawalResponse(BaseResponseSchema):
    """Response schema for WithdrawalRequest."""
    id: UUID
    seller_id: UUID
    amount: Decimal
    status: WithdrawalStatus
    requested_at: datetime
    resolved_at: Optional[datetime] = None
    resolution_note: Optional[str] = None
    payout_reference: Optional[str] = None


class WithdrawalListResponse(BaseModel):
    items: List[WithdrawalResponse]
    total: int


# ==================== Reconciliation Schemas ====================

class ReconciliationRequest(BaseModel):
    """Reconcile one seller, or all sellers when seller_id is omitted."""
    seller_id: Optional[UUID] = None


class SellerReconciliationResponse(BaseModel):
    seller_id: UUID
    cached_before: Decimal
    computed: Decimal
    raw_balance: Decimal
    corrected: bool
    floor_engaged: bool


class ReconciliationResponse(BaseModel):
    started_at: datetime
    finished_at: Optional[datetime] = None
    checked: int
    corrected: int
    anomalies: int
    results: List[SellerReconciliationResponse]
    errors: List[Dict[str, str]]

