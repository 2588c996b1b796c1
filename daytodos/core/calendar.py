"""
Calendar semantics mapped onto ordered keys.

Todos are stored under ``<daynum>/<created>`` where ``daynum`` is 1 for
Monday through 7 for Sunday. Because keys sort bytewise, one day is a prefix
scan (``b"3/"`` for Wednesday) and a run of consecutive days is a range scan:
weekdays are ``[b"1", b"6")`` and the weekend is ``[b"6", b"8")``.

Within a day, items sort by their creation timestamp, so the timestamp text
must sort the same way as the times themselves: it is always UTC with six
fractional digits.
"""
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple


class UnknownDayError(ValueError):
    """Raised when a string does not name a day of the week."""

    pass


class Day(str, Enum):
    """Days of the week, Monday first."""
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @property
    def number(self) -> int:
        """1 for Monday through 7 for Sunday."""
        return list(Day).index(self) + 1

    @property
    def prefix(self) -> bytes:
        """Key prefix shared by every todo on this day."""
        return f"{self.number}/".encode()

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self]


_FULL_NAMES = {
    Day.MON: "monday",
    Day.TUE: "tuesday",
    Day.WED: "wednesday",
    Day.THU: "thursday",
    Day.FRI: "friday",
    Day.SAT: "saturday",
    Day.SUN: "sunday",
}

_LOOKUP = {name: day for day, name in _FULL_NAMES.items()}
_LOOKUP.update({day.value: day for day in Day})


def parse_day(text: str) -> Day:
    """
    Resolve ``text`` to a :class:`Day`.

    Accepts the short form (``"mon"``) or the full name (``"Monday"``),
    in any case.

    Raises:
        UnknownDayError: If ``text`` names no day
    """
    if isinstance(text, Day):
        return text
    day = _LOOKUP.get(str(text).strip().lower())
    if day is None:
        raise UnknownDayError(f"unknown day: {text}")
    return day


@dataclass(frozen=True)
class DayRange:
    """A half-open key range ``[start, end)`` covering consecutive days."""

    name: str
    first: Day
    last: Day

    @property
    def start(self) -> bytes:
        return str(self.first.number).encode()

    @property
    def end(self) -> bytes:
        return str(self.last.number + 1).encode()

    @property
    def days(self) -> Tuple[Day, ...]:
        return tuple(day for day in Day if self.first.number <= day.number <= self.last.number)


WEEKDAYS = DayRange("weekdays", Day.MON, Day.FRI)
WEEKEND = DayRange("weekend", Day.SAT, Day.SUN)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_created(created: datetime) -> str:
    """
    Render a creation time for use inside a key.

    Naive datetimes are taken to be UTC.

    Example:
        >>> format_created(datetime(2024, 1, 15, 10, 23, 45, 5, tzinfo=timezone.utc))
        '2024-01-15T10:23:45.000005Z'
    """
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    created = created.astimezone(timezone.utc).replace(tzinfo=None)
    return created.isoformat(timespec="microseconds") + "Z"


def todo_key(day: Day, created: datetime) -> bytes:
    """Key under which a todo for ``day`` created at ``created`` is stored."""
    return f"{day.number}/{format_created(created)}".encode()


class Stamper:
    """
    Hands out strictly increasing UTC timestamps.

    Two todos stamped within the same clock tick would otherwise get the same
    key and the second would overwrite the first.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        with self._lock:
            current = utc_now()
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current


stamper = Stamper()
