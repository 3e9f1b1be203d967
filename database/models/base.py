from sqlalchemy import TIMESTAMP
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

from core.utils import ensure_utc

Base = declarative_base()


class UtcTimestamp(TypeDecorator):
    """
    Timezone-aware timestamp that is always written and read as UTC.

    SQLite stores the wall time of whatever offset it is given and returns it
    naive, so values are converted to UTC before binding.
    """

    impl = TIMESTAMP(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)
