import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, func

from core.utils import ensure_utc
from database.models import Reminder, ReminderStatus
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ReminderRepository(BaseRepository):
    def find_active_due_between(self, start: datetime, end: datetime) -> List[Reminder]:
        """
        Active reminders whose effective due date falls in [start, end].

        The effective due date is next_due_date when set, due_date otherwise.
        """
        effective_due = func.coalesce(Reminder.next_due_date, Reminder.due_date)
        stmt = select(Reminder).where(
            Reminder.status == ReminderStatus.ACTIVE.value,
            effective_due >= ensure_utc(start),
            effective_due <= ensure_utc(end),
        ).order_by(effective_due)
        return list(self.db.execute(stmt).scalars().all())

    def get_by_id(self, reminder_id: Any) -> Optional[Reminder]:
        stmt = select(Reminder).where(Reminder.id == reminder_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def add(self, reminder: Reminder) -> Reminder:
        self.db.add(reminder)
        self.db.flush()
        return reminder

    def save(self, reminder: Reminder) -> Reminder:
        """Persist changes to a reminder, which may come from another session."""
        merged = self.db.merge(reminder)
        self.db.flush()
        return merged
