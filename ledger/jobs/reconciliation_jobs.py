"""
Periodic reconciliation of cached seller balances.

Runs outside any request, so it opens its own session. A failure for one
seller is recorded in the report and the sweep moves on to the next.
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from ledger.database import get_db_session
from ledger.services.reconciliation_service import ReconciliationService


async def reconcile_all_sellers(session_factory: Optional[async_sessionmaker] = None) -> Dict[str, Any]:
    """Reconcile every seller and return the report as a dict."""
    if session_factory is not None:
        async with session_factory() as db:
            report = await ReconciliationService(db).reconcile_all()
    else:
        async with get_db_session() as db:
            report = await ReconciliationService(db).reconcile_all()
    return report.as_dict()
