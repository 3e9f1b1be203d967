from database.repositories.base import BaseRepository
from database.repositories.reminder import ReminderRepository
from database.repositories.user import UserRepository
from database.repositories.notification import NotificationRepository

__all__ = [
    'BaseRepository',
    'ReminderRepository',
    'UserRepository',
    'NotificationRepository',
]
