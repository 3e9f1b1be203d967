"""Periodic execution of the reminder scan and notification cleanup.

ReminderScheduler owns one APScheduler BackgroundScheduler per instance.
Job bodies run on APScheduler's thread pool, so a slow scan neither blocks
the caller nor delays the daily cleanup.
"""

import logging
import threading
from typing import Any, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from core.config_loader import SchedulerConfig
from core.formatting import resolve_timezone
from pipeline.scanner import DueReminderScanner, NotificationCleanup, ScanReport

logger = logging.getLogger(__name__)

SCAN_JOB_ID = "reminder_scan"
CLEANUP_JOB_ID = "notification_cleanup"


class ReminderScheduler:
    """
    Starts and stops the scan and cleanup timers.

    ``start`` and ``stop`` are idempotent. ``stop`` does not wait for or
    cancel a scan already in flight.
    """

    def __init__(
        self,
        scanner: DueReminderScanner,
        cleanup: NotificationCleanup,
        config: Optional[SchedulerConfig] = None,
    ):
        self.scanner = scanner
        self.cleanup = cleanup
        self.config = config or SchedulerConfig()
        self.timezone = resolve_timezone(self.config.timezone)
        self._scheduler: Optional[BackgroundScheduler] = None
        self._lock = threading.Lock()
        self.last_scan: Optional[ScanReport] = None
        self.last_cleanup_count: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        with self._lock:
            if self.is_running:
                logger.info("Reminder scheduler already running, skipping start")
                return

            scheduler = BackgroundScheduler(timezone=self.timezone)
            scheduler.add_job(
                self._run_scan,
                trigger="interval",
                minutes=self.config.scan_interval_minutes,
                id=SCAN_JOB_ID,
                replace_existing=True,
                # Overlapping scans are tolerated, not prevented
                max_instances=self.config.max_overlapping_scans,
                coalesce=True,
            )
            scheduler.add_job(
                self._run_cleanup,
                trigger="cron",
                hour=self.config.cleanup_hour,
                minute=self.config.cleanup_minute,
                timezone=self.timezone,
                id=CLEANUP_JOB_ID,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            scheduler.start()
            self._scheduler = scheduler

        logger.info(
            f"Reminder scheduler started: scan every {self.config.scan_interval_minutes} minutes, "
            f"cleanup daily at {self.config.cleanup_hour:02d}:{self.config.cleanup_minute:02d} "
            f"({self.config.timezone})"
        )

    def stop(self) -> None:
        with self._lock:
            if not self.is_running:
                logger.debug("Reminder scheduler not running, nothing to stop")
                self._scheduler = None
                return
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
        logger.info("Reminder scheduler stopped")

    def trigger_scan_now(self) -> ScanReport:
        """Run one scan synchronously, outside the regular cadence."""
        logger.info("Manual reminder scan triggered")
        report = self.scanner.scan()
        self.last_scan = report
        return report

    def trigger_cleanup_now(self) -> int:
        logger.info("Manual notification cleanup triggered")
        deleted = self.cleanup.cleanup()
        self.last_cleanup_count = deleted
        return deleted

    def status(self) -> Dict[str, Any]:
        jobs = []
        scheduler = self._scheduler
        if scheduler is not None and scheduler.running:
            for job in scheduler.get_jobs():
                next_run = getattr(job, 'next_run_time', None)
                jobs.append({
                    'id': job.id,
                    'next_run_time': next_run.isoformat() if next_run else None,
                })
        return {
            'running': self.is_running,
            'jobs': jobs,
            'last_scan': self.last_scan.to_dict() if self.last_scan else None,
            'last_cleanup_count': self.last_cleanup_count,
        }

    def _run_scan(self) -> None:
        try:
            self.last_scan = self.scanner.scan()
        except Exception as e:
            logger.error(f"Scheduled reminder scan crashed: {e}", exc_info=True)

    def _run_cleanup(self) -> None:
        try:
            self.last_cleanup_count = self.cleanup.cleanup()
        except Exception as e:
            logger.error(f"Scheduled notification cleanup crashed: {e}", exc_info=True)
