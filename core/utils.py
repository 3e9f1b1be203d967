import logging
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC.

    SQLite (and some drivers) hand back naive datetimes even for
    ``TIMESTAMP(timezone=True)`` columns, so everything read from the
    store goes through here before arithmetic against ``utcnow()``.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def mask_email(email: Optional[str]) -> str:
    """
    Mask email address for safe logging (PII protection).

    Shows only domain, e.g., "***@example.com"
    """
    if not email or '@' not in email:
        return "***"
    _, domain = email.rsplit('@', 1)
    return f"***@{domain}"
