"""Withdrawal request model."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, ForeignKey, Text, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger.database import Base
from ledger.db_types import UUIDType, Money
from ledger.core.enum_utils import enum_comment

if TYPE_CHECKING:
    from ledger.models.seller import Seller


class WithdrawalStatus(str, Enum):
    """Withdrawal request status."""
    PENDING = "PENDING"         # Requested, amount reserved
    COMPLETED = "COMPLETED"     # Funds paid out
    REJECTED = "REJECTED"       # Declined, amount returned to balance


TERMINAL_WITHDRAWAL_STATUSES = {
    WithdrawalStatus.COMPLETED.value,
    WithdrawalStatus.REJECTED.value,
}


class WithdrawalRequest(Base):
    """
    Seller payout request.

    PENDING -> COMPLETED | REJECTED, exactly once. Terminal rows never re-open.
    """
    __tablename__ = "withdrawal_requests"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_withdrawal_requests_amount_positive"),
        Index("ix_withdrawal_requests_seller_status", "seller_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        ForeignKey("sellers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(Money(), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WithdrawalStatus.PENDING.value,
        comment=enum_comment(WithdrawalStatus)
    )

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Resolution details
    resolution_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payout_reference: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Bank/gateway reference for completed payouts"
    )

    # Relationships
    seller: Mapped["Seller"] = relationship("Seller", back_populates="withdrawal_requests")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_WITHDRAWAL_STATUSES

    def __repr__(self) -> str:
        return f"<WithdrawalRequest(seller='{self.seller_id}', {self.status}, amount={self.amount})>"
