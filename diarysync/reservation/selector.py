"""
Reservation selection.

Reservations are blocks carrying a `custom-reservation` attribute whose value
is a YYYYMMDD date. A window picks the reservations due today, from today on,
or from a date shifted by SQLite-style modifiers ("-7 days", "+1 month",
"start of month", ...).
"""

import logging
import re
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..models import AttributeFilter, BlockQuery, Comparison, ReservationItem
from ..store import BaseDocumentStore


DATE_FORMAT = "%Y%m%d"

UNIT_PATTERN = re.compile(r"^([+-]?\d+(?:\.\d+)?)\s+(day|hour|minute|second|month|year)s?$")
START_OF_PATTERN = re.compile(r"^start of (day|month|year)$")
WEEKDAY_PATTERN = re.compile(r"^weekday ([0-6])$")


class WindowKind(str, Enum):
    TODAY = "today"
    FUTURE = "future"
    DATE_OFFSET = "date_offset"


class TimeWindow(BaseModel):
    """Which reservations to select, relative to the current local date."""

    kind: WindowKind = Field(WindowKind.TODAY)
    modifiers: List[str] = Field(default_factory=list)

    @classmethod
    def today(cls) -> "TimeWindow":
        return cls(kind=WindowKind.TODAY)

    @classmethod
    def future(cls) -> "TimeWindow":
        return cls(kind=WindowKind.FUTURE)

    @classmethod
    def date_offset(cls, *modifiers: str) -> "TimeWindow":
        return cls(kind=WindowKind.DATE_OFFSET, modifiers=list(modifiers))


def _shift_months(moment: datetime, months: int) -> datetime:
    # Day overflow rolls into the next month, as SQLite does
    total = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(total, 12)
    first = moment.replace(year=year, month=month + 1, day=1)
    return first + timedelta(days=moment.day - 1)


def apply_modifier(moment: datetime, modifier: str) -> datetime:
    """
    Apply one SQLite date modifier to `moment`.

    Raises:
        ValueError: If the modifier is not understood
    """
    text = modifier.strip().lower()
    if text in ("localtime", "utc"):
        return moment

    match = UNIT_PATTERN.match(text)
    if match:
        amount, unit = float(match.group(1)), match.group(2)
        if unit in ("month", "year"):
            if not amount.is_integer():
                raise ValueError(f"Fractional {unit} offsets are not supported: {modifier!r}")
            return _shift_months(moment, int(amount) * (12 if unit == "year" else 1))
        return moment + timedelta(**{f"{unit}s": amount})

    match = START_OF_PATTERN.match(text)
    if match:
        unit = match.group(1)
        moment = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        if unit in ("month", "year"):
            moment = moment.replace(day=1)
        if unit == "year":
            moment = moment.replace(month=1)
        return moment

    match = WEEKDAY_PATTERN.match(text)
    if match:
        # SQLite counts Sunday as 0
        target = int(match.group(1))
        current = (moment.weekday() + 1) % 7
        return moment + timedelta(days=(target - current) % 7)

    raise ValueError(f"Unknown date modifier: {modifier!r}")


class ReservationSelector:
    """
    Time-windowed query over reservation blocks.

    Every call to `select` queries the store again.
    """

    def __init__(self, store: BaseDocumentStore, attribute: str = "custom-reservation",
                 now: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.attribute = attribute
        self.now = now or datetime.now

    def condition(self, window: TimeWindow) -> Tuple[Comparison, str]:
        """Comparison and YYYYMMDD bound for a window."""
        moment = self.now()
        if window.kind == WindowKind.TODAY:
            return Comparison.EQ, moment.strftime(DATE_FORMAT)
        if window.kind == WindowKind.FUTURE:
            return Comparison.GE, moment.strftime(DATE_FORMAT)
        for modifier in window.modifiers:
            moment = apply_modifier(moment, modifier)
        return Comparison.GE, moment.strftime(DATE_FORMAT)

    def select(self, window: TimeWindow) -> List[ReservationItem]:
        """
        Select reservations in a window, ordered by ascending due date.

        Args:
            window: today, future or date_offset(...)

        Returns:
            The matching reservations
        """
        op, bound = self.condition(window)
        blocks = self.store.query(BlockQuery(
            attribute=AttributeFilter(name=self.attribute, op=op, value=bound),
            order_by_attribute=True,
        ))
        items = [
            ReservationItem(id=block.id, content=block.content, date=block.attributes.get(self.attribute, ""))
            for block in blocks
        ]
        logging.info(f"Selected {len(items)} reservations ({window.kind.value} {op.value} {bound})")
        return items
