"""
Display formatting for amounts and due dates.

Currency and date rules are injected from the ``formatting`` config section
instead of being tied to one locale. The defaults reproduce the product's
original en-IN output, e.g. ``₹1,50,000.00`` and ``15 March 2025 at 09:30 AM``.
"""

import logging
from datetime import datetime, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from dateutil import tz

from core.config_loader import FormattingConfig
from core.utils import ensure_utc

logger = logging.getLogger(__name__)


def _group_digits(integer_part: str, grouping: str) -> str:
    if grouping == "indian" and len(integer_part) > 3:
        # Last three digits, then groups of two: 12,34,567
        head, tail = integer_part[:-3], integer_part[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        return ",".join(groups + [tail])
    return f"{int(integer_part):,}"


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Look up a tz database name, falling back to UTC for unknown names."""
    zone = tz.gettz(name) if name else None
    if zone is None:
        logger.warning(f"Unknown timezone '{name}', falling back to UTC")
        return timezone.utc
    return zone


class DisplayFormatter:
    """Formats amounts and datetimes for user-facing messages."""

    def __init__(self, config: Optional[FormattingConfig] = None):
        self.config = config or FormattingConfig()
        self.timezone = resolve_timezone(self.config.timezone)

    def format_amount(self, amount: Union[Decimal, int, float, str]) -> str:
        places = self.config.decimal_places
        quantum = Decimal(1).scaleb(-places)
        value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)

        sign = "-" if value < 0 else ""
        text = f"{abs(value):.{places}f}"
        integer_part, _, fraction = text.partition(".")

        grouped = _group_digits(integer_part, self.config.digit_grouping)
        if fraction:
            grouped = f"{grouped}.{fraction}"
        return f"{sign}{self.config.currency_symbol}{grouped}"

    def localize(self, value: datetime) -> datetime:
        return ensure_utc(value).astimezone(self.timezone)

    def format_date(self, value: datetime) -> str:
        return self.localize(value).strftime(self.config.date_format)

    def format_datetime(self, value: datetime) -> str:
        return self.localize(value).strftime(self.config.datetime_format)
