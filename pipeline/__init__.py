"""Reminder scanning, cleanup and scheduling."""

from .scanner import DueReminderScanner, NotificationCleanup, ScanReport, ProcessOutcome
from .scheduler import ReminderScheduler

__all__ = ['DueReminderScanner', 'NotificationCleanup', 'ScanReport', 'ProcessOutcome', 'ReminderScheduler']
