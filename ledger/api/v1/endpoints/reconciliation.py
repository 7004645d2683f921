"""API endpoints for balance reconciliation."""
from typing import Optional

from fastapi import APIRouter

from ledger.api.deps import Ledger
from ledger.jobs.scheduler import get_job_status
from ledger.schemas.ledger import ReconciliationRequest, ReconciliationResponse

router = APIRouter()


@router.post("", response_model=ReconciliationResponse)
async def run_reconciliation(ledger: Ledger, data: Optional[ReconciliationRequest] = None):
    """Reconcile one seller, or every seller when no seller_id is given."""
    seller_id = data.seller_id if data else None
    report = await ledger.reconcile(seller_id)
    return report.as_dict()


@router.get("/jobs")
async def get_reconciliation_jobs():
    """Status of the scheduled reconciliation sweep."""
    return {"jobs": get_job_status()}
