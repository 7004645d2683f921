from typing import Optional, Dict, Any, List
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.audit_log import AuditLog
from ledger.models.withdrawal import WithdrawalRequest


class AuditService:
    """
    Audit service for ledger changes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[uuid.UUID] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
        performed_by: Optional[str] = None,
    ) -> AuditLog:
        """
        Create an audit log entry.

        Args:
            action: The action performed (BALANCE_CORRECTED, WITHDRAWAL_COMPLETED, etc.)
            entity_type: Type of entity (SELLER, WITHDRAWAL, COMMISSION)
            entity_id: ID of the affected entity
            old_values: Previous values
            new_values: New values
            description: Human-readable description
            performed_by: Operator or job that made the change

        Returns:
            The created AuditLog entry
        """
        audit_log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values,
            new_values=new_values,
            description=description,
            performed_by=performed_by,
        )
        self.db.add(audit_log)
        await self.db.flush()
        return audit_log

    async def log_balance_corrected(
        self,
        seller_id: uuid.UUID,
        cached: Decimal,
        computed: Decimal,
        breakdown: Optional[Dict[str, Any]] = None,
        performed_by: Optional[str] = None,
    ) -> AuditLog:
        """Log a cached balance overwrite made by reconciliation."""
        return await self.log(
            action="BALANCE_CORRECTED",
            entity_type="SELLER",
            entity_id=seller_id,
            old_values={"available_commission": str(cached)},
            new_values={"available_commission": str(computed), "breakdown": breakdown},
            description=f"Cached balance corrected: {cached} -> {computed}",
            performed_by=performed_by,
        )

    async def log_withdrawal_transition(
        self,
        request: WithdrawalRequest,
        old_status: Optional[str],
        performed_by: Optional[str] = None,
    ) -> AuditLog:
        """Log a withdrawal request creation or resolution."""
        return await self.log(
            action=f"WITHDRAWAL_{request.status}" if old_status else "WITHDRAWAL_REQUESTED",
            entity_type="WITHDRAWAL",
            entity_id=request.id,
            old_values={"status": old_status} if old_status else None,
            new_values={
                "status": request.status,
                "amount": str(request.amount),
                "seller_id": str(request.seller_id),
            },
            description=f"Withdrawal {request.id}: {old_status or 'NEW'} -> {request.status}",
            performed_by=performed_by,
        )

    async def log_commission_transition(
        self,
        event,
        old_status: str,
        performed_by: Optional[str] = None,
    ) -> AuditLog:
        """Log a commission confirmation or void."""
        return await self.log(
            action=f"COMMISSION_{event.status}",
            entity_type="COMMISSION",
            entity_id=event.id,
            old_values={"status": old_status, "amount": str(event.original_amount)},
            new_values={"status": event.status, "amount": str(event.amount)},
            description=f"Commission for order {event.order_id}: {old_status} -> {event.status}",
            performed_by=performed_by,
        )

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: uuid.UUID,
    ) -> List[AuditLog]:
        """Get audit history for a specific entity, oldest first."""
        result = await self.db.execute(
            select(AuditLog)
            .where(
                AuditLog.entity_type == entity_type,
                AuditLog.entity_id == entity_id,
            )
            .order_by(AuditLog.created_at.asc())
        )
        return list(result.scalars().all())
