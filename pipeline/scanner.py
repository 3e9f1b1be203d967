"""Due-reminder scanning and notification retention.

DueReminderScanner finds active reminders coming due inside the notice
window and pushes each one through the guard and the dispatcher.
NotificationCleanup removes old read in-app notifications. Both are plain
synchronous operations; pipeline.scheduler decides when they run.
"""

import enum
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from core.utils import ensure_utc, utcnow
from database.models import Reminder
from database.uow import UnitOfWorkFactory
from notification.dispatcher import NotificationDispatcher
from notification.tracker import SuppressionGuard

logger = logging.getLogger(__name__)


class ProcessOutcome(str, enum.Enum):
    NOTIFIED = "notified"
    NOT_DUE = "not_due"
    SUPPRESSED = "suppressed"
    USER_NOT_FOUND = "user_not_found"
    DISPATCH_FAILED = "dispatch_failed"


@dataclass
class ScanReport:
    """Result of one scan."""
    started_at: datetime
    found: int = 0
    notified: int = 0
    not_due: int = 0
    suppressed: int = 0
    failed: int = 0
    error: Optional[str] = None
    execution_time: float = 0.0
    outcomes: dict = field(default_factory=dict)  # reminder id -> ProcessOutcome value

    @property
    def success(self) -> bool:
        return self.error is None

    def record(self, reminder_id, outcome: ProcessOutcome) -> None:
        self.outcomes[str(reminder_id)] = outcome.value
        if outcome == ProcessOutcome.NOTIFIED:
            self.notified += 1
        elif outcome == ProcessOutcome.NOT_DUE:
            self.not_due += 1
        elif outcome == ProcessOutcome.SUPPRESSED:
            self.suppressed += 1
        else:
            self.failed += 1

    def to_dict(self) -> dict:
        return {
            'started_at': self.started_at.isoformat(),
            'found': self.found,
            'notified': self.notified,
            'not_due': self.not_due,
            'suppressed': self.suppressed,
            'failed': self.failed,
            'error': self.error,
            'execution_time': round(self.execution_time, 3),
            'outcomes': dict(self.outcomes),
        }


class DueReminderScanner:
    """
    Finds reminders due soon and dispatches the ones the guard lets through.

    Every reminder is handled in its own unit of work so a failure on one
    never rolls back or blocks another.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        uow: UnitOfWorkFactory,
        guard: Optional[SuppressionGuard] = None,
        notice_window_minutes: int = 120,
    ):
        self.dispatcher = dispatcher
        self.guard = guard or SuppressionGuard()
        self.uow = uow
        self.notice_window = timedelta(minutes=notice_window_minutes)

    def scan(self, now: Optional[datetime] = None) -> ScanReport:
        """Run one scan. Never raises; a failed query is reported on the result."""
        now = ensure_utc(now) if now else utcnow()
        start_time = time.time()
        report = ScanReport(started_at=now)
        window_end = now + self.notice_window

        try:
            with self.uow() as store:
                reminders = store.reminders.find_active_due_between(now, window_end)
        except Exception as e:
            logger.error(f"Reminder scan query failed: {e}", exc_info=True)
            report.error = str(e)
            report.execution_time = time.time() - start_time
            return report

        report.found = len(reminders)
        logger.info(f"Found {len(reminders)} reminder(s) due before {window_end.isoformat()}")

        for reminder in reminders:
            try:
                outcome = self.process_one(reminder, now)
            except Exception as e:
                logger.error(f"Error processing reminder {reminder.id}: {e}", exc_info=True)
                report.failed += 1
                report.outcomes[str(reminder.id)] = 'error'
                continue
            report.record(reminder.id, outcome)

        report.execution_time = time.time() - start_time
        logger.info(
            f"Scan complete: {report.notified} notified, {report.suppressed} suppressed, "
            f"{report.not_due} not due, {report.failed} failed ({report.execution_time:.2f}s)"
        )
        return report

    def process_one(self, reminder: Reminder, now: datetime) -> ProcessOutcome:
        """
        Guard, resolve the owner, dispatch, and record the send time.

        Raises only if persisting last_notified_at fails.
        """
        now = ensure_utc(now)
        decision = self.guard.evaluate(reminder, now)

        if not decision.allowed:
            if not decision.should_notify:
                return ProcessOutcome.NOT_DUE
            logger.info(f"Skipping reminder {reminder.id} - notified at {reminder.last_notified_at}")
            return ProcessOutcome.SUPPRESSED

        with self.uow() as store:
            user = store.users.find_by_id(reminder.user_id)
        if user is None:
            logger.error(f"User {reminder.user_id} not found for reminder {reminder.id}")
            return ProcessOutcome.USER_NOT_FOUND

        logger.info(
            f"Sending reminder for '{reminder.title}' "
            f"({decision.minutes_until_due} minutes until due)"
        )
        result = self.dispatcher.dispatch(reminder, user, now=now)
        if not result.overall_success:
            logger.error(f"Failed to send reminder {reminder.id}: {result.error}")
            return ProcessOutcome.DISPATCH_FAILED

        with self.uow() as store:
            reminder.last_notified_at = now
            store.reminders.save(reminder)
        return ProcessOutcome.NOTIFIED


class NotificationCleanup:
    """Deletes read in-app notifications past the retention period."""

    def __init__(self, uow: UnitOfWorkFactory, retention_days: int = 30):
        self.uow = uow
        self.retention = timedelta(days=retention_days)

    def cleanup(self, now: Optional[datetime] = None) -> int:
        now = ensure_utc(now) if now else utcnow()
        cutoff = now - self.retention
        try:
            with self.uow() as store:
                deleted = store.notifications.delete_read_before(cutoff)
        except Exception as e:
            logger.error(f"Notification cleanup failed: {e}", exc_info=True)
            return 0

        logger.info(f"Cleaned up {deleted} old notification(s)")
        return deleted
