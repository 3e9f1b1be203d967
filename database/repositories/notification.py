import logging
from datetime import datetime
from typing import Any, List

from sqlalchemy import select, delete

from core.utils import ensure_utc
from database.models import Notification
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository):
    def create(self, **fields: Any) -> Notification:
        notification = Notification(**fields)
        self.db.add(notification)
        self.db.flush()  # Generate ID
        return notification

    def list_for_user(self, user_id: Any, unread_only: bool = False) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def delete_read_before(self, cutoff: datetime) -> int:
        """Delete read notifications whose read_at is older than cutoff."""
        stmt = delete(Notification).where(
            Notification.is_read.is_(True),
            Notification.read_at < ensure_utc(cutoff),
        ).execution_options(synchronize_session=False)
        result = self.db.execute(stmt)
        count = result.rowcount or 0
        if count > 0:
            logger.info(f"Deleted {count} read notifications older than {cutoff.isoformat()}")
        return count
