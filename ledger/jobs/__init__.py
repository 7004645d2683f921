# Background jobs
from ledger.jobs.scheduler import (
    scheduler,
    start_scheduler,
    shutdown_scheduler,
    get_job_status,
)
from ledger.jobs.reconciliation_jobs import reconcile_all_sellers

__all__ = [
    "scheduler",
    "start_scheduler",
    "shutdown_scheduler",
    "get_job_status",
    "reconcile_all_sellers",
]
