"""
Reconciliation Service

Realigns each seller's cached available_commission with the balance
calculator. Only the cache field (and the audit log) is written; commission
events and withdrawal requests are read-only here, so a sweep can run next
to live traffic. Two writers of the cache converge on the same value for the
same event set, so last-write-wins is acceptable.

Drift and floor-engaged balances are logged as warnings, not raised.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Dict, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.exceptions import NotFound
from ledger.core.money import ZERO
from ledger.models.seller import Seller
from ledger.services.audit_service import AuditService
from ledger.services.balance_calculator import BalanceBreakdown, load_balance

logger = logging.getLogger(__name__)


@dataclass
class SellerReconciliation:
    """Outcome for one seller."""
    seller_id: uuid.UUID
    cached_before: Decimal
    computed: Decimal
    raw_balance: Decimal
    corrected: bool
    floor_engaged: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "seller_id": str(self.seller_id),
            "cached_before": str(self.cached_before),
            "computed": str(self.computed),
            "raw_balance": str(self.raw_balance),
            "corrected": self.corrected,
            "floor_engaged": self.floor_engaged,
        }


@dataclass
class ReconciliationReport:
    """Summary of a reconciliation run."""
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    results: List[SellerReconciliation] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def checked(self) -> int:
        return len(self.results)

    @property
    def corrected(self) -> int:
        return sum(1 for r in self.results if r.corrected)

    @property
    def anomalies(self) -> int:
        return sum(1 for r in self.results if r.floor_engaged)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "checked": self.checked,
            "corrected": self.corrected,
            "anomalies": self.anomalies,
            "results": [r.as_dict() for r in self.results],
            "errors": self.errors,
        }


class ReconciliationService:
    """Detects and repairs drift in cached seller balances."""

    def __init__(self, db: AsyncSession, performed_by: str = "reconciliation"):
        self.db = db
        self.performed_by = performed_by
        self.audit = AuditService(db)

    async def apply(
        self,
        seller: Seller,
        breakdown: BalanceBreakdown,
        detect_drift: bool = True,
    ) -> SellerReconciliation:
        """
        Compare the cached balance against a computed breakdown and overwrite
        it on mismatch. Flushes but does not commit.

        With detect_drift=False the overwrite is the expected result of a
        ledger mutation and is neither warned about nor audited.
        """
        cached = seller.available_commission if seller.available_commission is not None else ZERO
        cached = Decimal(str(cached))
        computed = breakdown.available_balance
        corrected = cached != computed

        if breakdown.floor_engaged:
            logger.warning(
                f"Balance anomaly for seller {seller.id}: raw balance {breakdown.raw_balance} "
                f"is negative (confirmed={breakdown.confirmed_earned}, "
                f"reversed={breakdown.confirmed_reversed}, "
                f"withdrawn={breakdown.completed_withdrawals}, "
                f"pending={breakdown.pending_withdrawals}); floored to 0"
            )

        if corrected:
            seller.available_commission = computed

        if corrected and detect_drift:
            logger.warning(
                f"Cached balance drift for seller {seller.id}: cached={cached} computed={computed}"
            )
            await self.audit.log_balance_corrected(
                seller.id,
                cached,
                computed,
                breakdown=breakdown.as_dict(),
                performed_by=self.performed_by,
            )

        seller.balance_reconciled_at = datetime.now(timezone.utc)
        await self.db.flush()

        return SellerReconciliation(
            seller_id=seller.id,
            cached_before=cached,
            computed=computed,
            raw_balance=breakdown.raw_balance,
            corrected=corrected,
            floor_engaged=breakdown.floor_engaged,
        )

    async def refresh(self, seller: Seller, detect_drift: bool = False) -> SellerReconciliation:
        """Recompute and store the cache for an already-loaded seller (no commit)."""
        breakdown = await load_balance(self.db, seller.id)
        return await self.apply(seller, breakdown, detect_drift=detect_drift)

    async def reconcile_seller(self, seller_id: uuid.UUID) -> SellerReconciliation:
        """Reconcile one seller and commit."""
        result = await self.db.execute(
            select(Seller)
            .where(Seller.id == seller_id)
            .execution_options(populate_existing=True)
        )
        seller = result.scalar_one_or_none()
        if seller is None:
            raise NotFound(f"Seller {seller_id} not found", {"seller_id": str(seller_id)})

        outcome = await self.refresh(seller, detect_drift=True)
        await self.db.commit()
        return outcome

    async def reconcile_all(self) -> ReconciliationReport:
        """
        Reconcile every seller, committing per seller.

        A failure for one seller is logged and reported; the sweep continues.
        """
        report = ReconciliationReport()

        result = await self.db.execute(select(Seller.id).order_by(Seller.created_at.asc()))
        seller_ids = list(result.scalars().all())
        logger.info(f"Reconciling {len(seller_ids)} sellers")

        for seller_id in seller_ids:
            try:
                report.results.append(await self.reconcile_seller(seller_id))
            except Exception as e:
                await self.db.rollback()
                logger.error(f"Reconciliation failed for seller {seller_id}: {e}")
                report.errors.append({"seller_id": str(seller_id), "error": str(e)})

        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"Reconciliation finished: {report.checked} checked, "
            f"{report.corrected} corrected, {report.anomalies} anomalies, "
            f"{len(report.errors)} errors"
        )
        return report

    async def reconcile(self, seller_id: Optional[uuid.UUID] = None) -> ReconciliationReport:
        """Reconcile one seller, or every seller when seller_id is None."""
        if seller_id is None:
            return await self.reconcile_all()

        report = ReconciliationReport()
        report.results.append(await self.reconcile_seller(seller_id))
        report.finished_at = datetime.now(timezone.utc)
        return report
