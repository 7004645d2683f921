"""Seller model: owner of commission events and withdrawal requests."""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger.database import Base
from ledger.db_types import UUIDType, Money

if TYPE_CHECKING:
    from ledger.models.commission import CommissionEvent
    from ledger.models.withdrawal import WithdrawalRequest


class Seller(Base):
    """
    Marketplace seller.

    available_commission is a denormalized cache of the balance calculator's
    result. It is written only under the seller lock or by reconciliation.
    """
    __tablename__ = "sellers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Cached balance (derived, repairable)
    available_commission: Mapped[Decimal] = mapped_column(
        Money(),
        default=Decimal("0.00"),
        nullable=False,
        comment="Cached available balance; reconciled against the ledger"
    )
    balance_reconciled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    commission_events: Mapped[List["CommissionEvent"]] = relationship(
        "CommissionEvent",
        back_populates="seller",
        lazy="raise"
    )
    withdrawal_requests: Mapped[List["WithdrawalRequest"]] = relationship(
        "WithdrawalRequest",
        back_populates="seller",
        lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Seller(name='{self.name}', available={self.available_commission})>"
