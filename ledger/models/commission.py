"""Commission event log.

One row per commission fact for a seller and an order:
- EARNED rows come from order revenue (delivered / paid orders)
- REVERSED rows are clawbacks after a confirmed commission was refunded

Rows are never deleted. Cancelling an order voids its rows instead.
"""
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


class CommissionType(str, Enum):
    """Commission event type."""
    EARNED = "EARNED"       # Commission owed to the seller for an order
    REVERSED = "REVERSED"   # Clawback of a previously confirmed commission


class CommissionStatus(str, Enum):
    """Commission event status."""
    PENDING = "PENDING"       # Revenue earned, funds not yet verified
    CONFIRMED = "CONFIRMED"   # Funds verified as collected
    VOIDED = "VOIDED"         # Order cancelled/refunded; kept for audit


# Allowed status transitions
COMMISSION_TRANSITIONS = {
    CommissionStatus.PENDING.value: {CommissionStatus.CONFIRMED.value, CommissionStatus.VOIDED.value},
    CommissionStatus.CONFIRMED.value: {CommissionStatus.VOIDED.value},
    CommissionStatus.VOIDED.value: set(),
}


class CommissionEvent(Base):
    """
    Append-only commission record.

    Only status (and amount, at confirmation time) change after creation.
    original_amount keeps the figure the order reported when it was earned.
    """
    __tablename__ = "commission_events"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_commission_events_amount_positive"),
        Index("ix_commission_events_seller_status_type", "seller_id", "status", "type"),
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
    order_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="External order reference"
    )

    amount: Mapped[Decimal] = mapped_column(Money(), nullable=False)
    original_amount: Mapped[Decimal] = mapped_column(
        Money(),
        nullable=False,
        comment="Amount at creation, before any partial confirmation"
    )

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommissionType.EARNED.value,
        comment=enum_comment(CommissionType)
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommissionStatus.PENDING.value,
        comment=enum_comment(CommissionStatus)
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Resolution
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    voided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    void_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )

    # Relationships
    seller: Mapped["Seller"] = relationship("Seller", back_populates="commission_events")

    @property
    def is_confirmed(self) -> bool:
        return self.status == CommissionStatus.CONFIRMED.value

    @property
    def is_voided(self) -> bool:
        return self.status == CommissionStatus.VOIDED.value

    def can_transition_to(self, status: str) -> bool:
        return status in COMMISSION_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return f"<CommissionEvent(order='{self.order_id}', {self.type}/{self.status}, amount={self.amount})>"
