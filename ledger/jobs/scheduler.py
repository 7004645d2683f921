"""
APScheduler configuration for background ledger jobs.

Only one job is registered: the reconciliation sweep that realigns every
seller's cached balance with the computed one.
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from ledger.config import settings

logger = logging.getLogger(__name__)

# Job stores
jobstores = {
    'default': MemoryJobStore()
}

# Executors
executors = {
    'default': AsyncIOExecutor(),
}

# Job defaults
job_defaults = {
    'coalesce': True,  # Combine multiple pending executions into one
    'max_instances': 1,  # Only one sweep at a time
    'misfire_grace_time': 60,
}

# Create scheduler
scheduler = AsyncIOScheduler(
    jobstores=jobstores,
    executors=executors,
    job_defaults=job_defaults,
    timezone=settings.SCHEDULER_TIMEZONE,
)

RECONCILE_JOB_ID = 'reconcile_all_sellers'


async def run_reconciliation_job():
    """Called by APScheduler; errors are logged so the scheduler keeps running."""
    from ledger.jobs.reconciliation_jobs import reconcile_all_sellers

    try:
        await reconcile_all_sellers()
    except Exception as e:
        logger.error(f"Job '{RECONCILE_JOB_ID}' failed: {e}")


def start_scheduler(interval_minutes: int = 60):
    """Start the background job scheduler."""
    if not scheduler.running:
        scheduler.add_job(
            run_reconciliation_job,
            'interval',
            minutes=interval_minutes,
            id=RECONCILE_JOB_ID,
            name='Reconcile Seller Balances',
            replace_existing=True,
        )

        scheduler.start()
        logger.info("Background job scheduler started")

        for job in scheduler.get_jobs():
            logger.info(f"Scheduled job: {job.name} - Next run: {job.next_run_time}")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background job scheduler stopped")


def get_job_status():
    """Get status of all scheduled jobs."""
    jobs = scheduler.get_jobs()
    return [
        {
            'id': job.id,
            'name': job.name,
            'next_run_time': str(job.next_run_time) if job.next_run_time else None,
            'trigger': str(job.trigger),
        }
        for job in jobs
    ]
