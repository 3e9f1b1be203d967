from .base import Base, UtcTimestamp
from .user import User
from .reminder import Reminder, ReminderStatus, ChannelType
from .notification import Notification, NotificationPriority

__all__ = [
    'Base',
    'UtcTimestamp',
    'User',
    'Reminder',
    'ReminderStatus',
    'ChannelType',
    'Notification',
    'NotificationPriority',
]
