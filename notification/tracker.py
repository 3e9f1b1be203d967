#!/usr/bin/env python3
"""
Notification Tracker - due-time and cooldown checks

Decides whether a reminder found by the scanner should be dispatched now:
it must be inside its own lead time, and it must not have been notified
within the cooldown window.

Usage:
    from notification.tracker import SuppressionGuard

    guard = SuppressionGuard(cooldown_hours=12)
    decision = guard.evaluate(reminder, now)
    if decision.allowed:
        dispatcher.dispatch(reminder, user)
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.utils import ensure_utc
from database.models import Reminder

logger = logging.getLogger(__name__)


@dataclass
class GuardDecision:
    """Result of evaluating one reminder."""
    minutes_until_due: int
    should_notify: bool  # Inside the reminder's lead time
    suppressed: bool  # Notified within the cooldown

    @property
    def allowed(self) -> bool:
        return self.should_notify and not self.suppressed


class SuppressionGuard:
    """Lead-time and cooldown rules; holds no state between calls."""

    def __init__(self, cooldown_hours: float = 12):
        self.cooldown = timedelta(hours=cooldown_hours)

    @staticmethod
    def minutes_until_due(due: datetime, now: datetime) -> int:
        """Whole minutes from now until due, rounded down; negative when overdue."""
        delta = ensure_utc(due) - ensure_utc(now)
        return math.floor(delta.total_seconds() / 60)

    def is_suppressed(self, last_notified_at: Optional[datetime], now: datetime) -> bool:
        if last_notified_at is None:
            return False
        return ensure_utc(now) - ensure_utc(last_notified_at) < self.cooldown

    def evaluate(self, reminder: Reminder, now: datetime) -> GuardDecision:
        minutes = self.minutes_until_due(reminder.effective_due_date, now)
        should_notify = minutes <= reminder.reminder_lead_minutes
        # Cooldown only matters for reminders that would otherwise be sent
        suppressed = should_notify and self.is_suppressed(reminder.last_notified_at, now)
        logger.debug(
            f"Reminder {reminder.id}: {minutes} min until due, lead {reminder.reminder_lead_minutes}, "
            f"should_notify={should_notify}, suppressed={suppressed}"
        )
        return GuardDecision(minutes_until_due=minutes, should_notify=should_notify, suppressed=suppressed)
