"""
Periodic sync runs on APScheduler.

A sync job must never overlap with itself: every job is registered with
``max_instances=1`` and ``coalesce=True``, so a trigger that fires while the
previous run is still going is folded into a single later run.
"""

import logging
from typing import Any, Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

CRON_FIELDS = ("minute", "hour", "day", "month", "day_of_week")


def parse_cron_expression(cron_expression: str) -> CronTrigger:
    """
    Build a trigger from a five-field crontab expression

    Args:
        cron_expression: "minute hour day month day_of_week", e.g. "0 2 * * *"

    Raises:
        ValueError: If the expression does not have exactly five fields, or
            APScheduler rejects a field
    """
    parts = cron_expression.split()
    if len(parts) != len(CRON_FIELDS):
        raise ValueError(
            f"Cron expression must have 5 parts ({' '.join(CRON_FIELDS)}), got {cron_expression!r}"
        )
    return CronTrigger(**dict(zip(CRON_FIELDS, parts)))


class SyncScheduler:
    """Registers sync jobs on a blocking APScheduler instance."""

    def __init__(self, scheduler: BlockingScheduler | None = None):
        self.scheduler = scheduler or BlockingScheduler()
        self.jobs = []

    def add_interval_job(self, job_func: Callable, interval_seconds: int, job_id: str, **kwargs) -> None:
        """Run ``job_func(**kwargs)`` every ``interval_seconds`` seconds."""
        if interval_seconds <= 0:
            raise ValueError(f"Interval must be positive, got {interval_seconds}")

        self._register(job_func, IntervalTrigger(seconds=interval_seconds), job_id, kwargs)
        logger.info(f"Added interval job '{job_id}' with {interval_seconds}s interval")

    def add_cron_job(self, job_func: Callable, cron_expression: str, job_id: str, **kwargs) -> None:
        """Run ``job_func(**kwargs)`` on a crontab schedule."""
        self._register(job_func, parse_cron_expression(cron_expression), job_id, kwargs)
        logger.info(f"Added cron job '{job_id}' with schedule '{cron_expression}'")

    def _register(self, job_func: Callable, trigger: BaseTrigger, job_id: str, kwargs: dict[str, Any]) -> None:
        job = self.scheduler.add_job(
            job_func,
            trigger=trigger,
            id=job_id,
            kwargs=kwargs,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        # replace_existing swaps the job inside APScheduler; mirror that here
        self.jobs = [existing for existing in self.jobs if existing.id != job_id] + [job]

    def remove_job(self, job_id: str) -> None:
        self.scheduler.remove_job(job_id)
        self.jobs = [job for job in self.jobs if job.id != job_id]
        logger.info(f"Removed job '{job_id}'")

    def start(self) -> None:
        """
        Block running scheduled jobs until interrupted

        Ctrl+C (or SystemExit) shuts the scheduler down cleanly.
        """
        logger.info(f"Starting sync scheduler with {len(self.jobs)} job(s)")
        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Scheduler interrupted")
            self.stop()

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Scheduler stopped")

    def list_jobs(self) -> list[dict[str, Any]]:
        """Describe every job known to APScheduler (id, name, next run, trigger)."""
        described = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            described.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": next_run.isoformat() if next_run else None,
                "trigger": str(job.trigger),
            })
        return described
