"""Conversions between ``HH:MM`` clock strings and minute-of-day integers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

from .errors import FormatError

MINUTES_PER_DAY = 1440

_CLOCK_RE = re.compile(r"^(?P<hour>[01]\d|2[0-3]):(?P<minute>[0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class Interval:
    """Half-open ``[start, end)`` range of minutes since midnight.

    ``end`` is never wrapped, so a booking running past midnight has
    ``end > 1440``.
    """

    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


def to_minutes(hhmm: str) -> int:
    match = _CLOCK_RE.match(str(hhmm))
    if match is None:
        raise FormatError(f"Invalid time format: {hhmm!r} (expected HH:MM)")
    return int(match.group("hour")) * 60 + int(match.group("minute"))


def to_clock(minutes: int) -> str:
    wrapped = minutes % MINUTES_PER_DAY
    return f"{wrapped // 60:02d}:{wrapped % 60:02d}"


def duration_minutes(duration_hours: float) -> int:
    return round(duration_hours * 60)


def interval(start_minutes: int, duration_hours: float) -> Interval:
    return Interval(start_minutes, start_minutes + duration_minutes(duration_hours))


def parse_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value)
    if not _DATE_RE.match(text):
        raise FormatError(f"Invalid date format: {text!r} (expected YYYY-MM-DD)")
    try:
        return date.fromisoformat(text)
    except ValueError as error:
        raise FormatError(f"Invalid calendar date: {text!r}") from error
