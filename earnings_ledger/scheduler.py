# earnings_ledger/scheduler.py
"""
Background scheduler for periodic ledger jobs.

Uses APScheduler to run:
- The settlement sweep (pending -> ready once the hold period passes)
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED

from earnings_ledger.background_tasks.settlement_tasks import refresh_settlement_statuses
from earnings_ledger.core.config import settings

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def _on_job_error(event):
    exc = event.exception
    logger.error(
        "Scheduled job FAILED: job_id=%s error=%s",
        event.job_id, exc,
        exc_info=(type(exc), exc, None) if exc else None,
    )


def _on_job_missed(event):
    logger.warning(
        "Scheduled job MISSED: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def init_scheduler():
    """Create the scheduler and register jobs. Called once at startup."""
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler(
        timezone="UTC",
        job_defaults={
            'coalesce': True,
            'max_instances': 1,
            'misfire_grace_time': 60
        }
    )

    interval = settings.SETTLEMENT_SWEEP_INTERVAL_MINUTES
    scheduler.add_job(
        func=refresh_settlement_statuses,
        trigger=IntervalTrigger(minutes=interval),
        id='refresh_settlement_statuses',
        name='Release Settled Event Earnings',
        replace_existing=True
    )
    logger.info(f"Scheduled job: refresh_settlement_statuses (every {interval} minutes)")

    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)
    return scheduler


def start_scheduler():
    sched = init_scheduler()
    if not sched.running:
        sched.start()
        logger.info("Background scheduler started")
    return sched


def shutdown_scheduler():
    global scheduler

    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
    scheduler = None
