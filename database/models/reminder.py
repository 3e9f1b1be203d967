import enum
import uuid
from datetime import datetime
from typing import Optional, Set

from sqlalchemy import Column, Text, Boolean, Integer, Numeric, ForeignKey, Index, Uuid, func
from sqlalchemy.orm import relationship

from core.utils import ensure_utc, utcnow
from .base import Base, UtcTimestamp


class ReminderStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class ChannelType(str, enum.Enum):
    """Delivery channels a reminder can be sent through."""
    EMAIL = "email"
    PUSH = "push"
    IN_APP = "in_app"


class Reminder(Base):
    """
    A bill, EMI or subscription the user wants to be reminded about.

    Created and edited by the CRUD layer. The notification pipeline only
    reads it, except for ``last_notified_at`` which is written after a
    successful dispatch.
    """
    __tablename__ = 'reminders'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    # What is due
    title = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reminder_type = Column(Text, nullable=False, default='bill')  # bill, emi, subscription, ...
    notes = Column(Text)
    is_recurring = Column(Boolean, nullable=False, default=False)
    repeat = Column(Text)  # Opaque recurrence rule, display only
    status = Column(Text, nullable=False, default=ReminderStatus.ACTIVE.value)

    # When it is due
    due_date = Column(UtcTimestamp, nullable=False)
    next_due_date = Column(UtcTimestamp)  # Overrides due_date once a recurring reminder has fired
    reminder_lead_minutes = Column(Integer, nullable=False, default=1440)

    # Delivery configuration
    notify_email = Column(Boolean, nullable=False, default=True)
    notify_push = Column(Boolean, nullable=False, default=False)
    notify_in_app = Column(Boolean, nullable=False, default=True)
    notification_email = Column(Text)  # Overrides the user's registered email

    # Dispatch bookkeeping
    last_notified_at = Column(UtcTimestamp)

    created_at = Column(UtcTimestamp, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(UtcTimestamp, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    user = relationship("User", back_populates="reminders")

    __table_args__ = (
        Index('idx_reminders_status_due', 'status', 'due_date'),
        Index('idx_reminders_status_next_due', 'status', 'next_due_date'),
    )

    @property
    def effective_due_date(self) -> datetime:
        return ensure_utc(self.next_due_date or self.due_date)

    @property
    def enabled_channels(self) -> Set[ChannelType]:
        channels = set()
        if self.notify_email:
            channels.add(ChannelType.EMAIL)
        if self.notify_push:
            channels.add(ChannelType.PUSH)
        if self.notify_in_app:
            channels.add(ChannelType.IN_APP)
        return channels

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        now = ensure_utc(now) if now else utcnow()
        return self.effective_due_date < now

    def __repr__(self) -> str:
        return f"<Reminder {self.id} '{self.title}' status={self.status}>"
