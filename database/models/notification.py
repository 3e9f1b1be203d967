import enum
import uuid

from sqlalchemy import Column, Text, ForeignKey, Boolean, Index, Uuid, func
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, UtcTimestamp


class NotificationPriority(str, enum.Enum):
    NORMAL = "normal"
    HIGH = "high"


class Notification(Base):
    """
    In-app notification shown in the user's notification list.

    Created by the in-app channel. Read/unread transitions belong to the
    API layer; rows are only deleted by the retention cleanup job.
    """
    __tablename__ = 'notifications'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    notification_type = Column(Text, nullable=False, default='reminder')
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)

    # Source object, e.g. related_type='Reminder'
    related_id = Column(Uuid(as_uuid=True))
    related_type = Column(Text)

    priority = Column(Text, nullable=False, default=NotificationPriority.NORMAL.value)

    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(UtcTimestamp)
    created_at = Column(UtcTimestamp, nullable=False, default=utcnow, server_default=func.now())

    user = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index('idx_notifications_user', 'user_id', 'created_at'),
        # Retention cleanup scans read rows by read_at
        Index('idx_notifications_read', 'is_read', 'read_at'),
    )
