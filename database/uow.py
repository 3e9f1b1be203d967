import contextlib
import logging
from typing import Callable, ContextManager, Iterator

from sqlalchemy.orm import Session, sessionmaker

from database.repositories import ReminderRepository, UserRepository, NotificationRepository

logger = logging.getLogger(__name__)


class ReminderStore:
    """Repositories sharing one Session (one transaction)."""

    def __init__(self, db: Session):
        self.db = db
        self.reminders = ReminderRepository(db)
        self.users = UserRepository(db)
        self.notifications = NotificationRepository(db)


UnitOfWorkFactory = Callable[[], ContextManager[ReminderStore]]


@contextlib.contextmanager
def reminder_uow(session_factory: sessionmaker) -> Iterator[ReminderStore]:
    """Per-unit-of-work transaction scope.

    Yields a ReminderStore bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with reminder_uow(session_factory) as store:
            reminder = store.reminders.get_by_id(reminder_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = session_factory()
    try:
        yield ReminderStore(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def uow_factory(session_factory: sessionmaker) -> UnitOfWorkFactory:
    """Bind reminder_uow to a specific session factory."""
    def _factory() -> ContextManager[ReminderStore]:
        return reminder_uow(session_factory)
    return _factory
