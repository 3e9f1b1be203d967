import uuid

from sqlalchemy import Column, Text, Uuid, func
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, UtcTimestamp


class User(Base):
    """
    Account that owns reminders. Owned by the auth/profile layer; the
    notification pipeline only reads it.
    """
    __tablename__ = 'users'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    display_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    created_at = Column(UtcTimestamp, nullable=False, default=utcnow, server_default=func.now())

    reminders = relationship("Reminder", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User {self.id} '{self.display_name}'>"
