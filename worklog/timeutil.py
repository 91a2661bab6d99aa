"""Minute-precision instants and working dates.

A working day starts at 05:00 and runs until 04:59 of the following
calendar day, so a record started at 01:30 still belongs to the previous
date.
"""

from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass
from typing import Optional, Tuple

from .clock import Clock, resolve
from .errors import FormatError
from .parsing import parse_date, parse_time_hm, parse_year_month

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

DAY_START = dt.time(5, 0)


def _truncate(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value.replace(second=0, microsecond=0)


@dataclass(frozen=True, order=True, slots=True)
class Instant:
    """A local wall-clock time truncated to the minute."""

    value: dt.datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _truncate(self.value))

    @classmethod
    def from_datetime(cls, value: dt.datetime) -> "Instant":
        return cls(value)

    @classmethod
    def parse_full(cls, text: str) -> "Instant":
        """Parse ``YYYY-MM-DDTHH:MM:SS``; the seconds are dropped."""
        try:
            return cls(dt.datetime.strptime(text.strip(), DATETIME_FORMAT))
        except (AttributeError, ValueError):
            raise FormatError("invalid timestamp", text) from None

    @classmethod
    def parse_hm(
        cls,
        text: str,
        reference: Optional[dt.date] = None,
        clock: Optional[Clock] = None,
    ) -> "Instant":
        """Combine a typed ``HH:MM``/``HHMM`` time with a calendar date (today by default)."""
        hour, minute = parse_time_hm(text)
        if reference is None:
            reference = resolve(clock).now().date()
        return cls(dt.datetime.combine(reference, dt.time(hour, minute)))

    @classmethod
    def parse_with_date(cls, working_date: "WorkingDate", text: str) -> "Instant":
        """Resolve a typed time against a working day (times before 05:00 fall on the next day)."""
        hour, minute = parse_time_hm(text)
        return working_date.and_hm(hour, minute)

    @classmethod
    def now(cls, clock: Optional[Clock] = None) -> "Instant":
        return cls(resolve(clock).now())

    def to_datetime(self) -> dt.datetime:
        return self.value

    def date(self) -> dt.date:
        return self.value.date()

    def time_of_day(self) -> dt.time:
        return self.value.time()

    def to_full_string(self) -> str:
        return self.value.strftime(DATETIME_FORMAT)

    def to_hm(self) -> str:
        return self.value.strftime(TIME_FORMAT)

    def __sub__(self, other: "Instant") -> dt.timedelta:
        if not isinstance(other, Instant):
            return NotImplemented
        return self.value - other.value

    def __str__(self) -> str:
        return self.to_hm()


def format_duration(delta: dt.timedelta) -> str:
    """Render a duration as ``HH:MM``, prefixed with ``-`` when negative."""
    minutes = int(delta.total_seconds() / 60)
    sign = "-" if minutes < 0 else ""
    hours, rest = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{rest:02d}"


@dataclass(frozen=True, order=True, slots=True)
class WorkingDate:
    """Calendar date of a working day."""

    value: dt.date

    @classmethod
    def parse(cls, text: str, clock: Optional[Clock] = None) -> "WorkingDate":
        year, month, day = parse_date(text, clock)
        try:
            return cls(dt.date(year, month, day))
        except ValueError:
            raise FormatError("invalid date", text) from None

    @classmethod
    def parse_year_month(cls, text: str) -> Tuple["WorkingDate", "WorkingDate"]:
        """Return the first and the last day of the month given as ``YYYY-MM``/``YYYYMM``."""
        year, month = parse_year_month(text)
        try:
            first = dt.date(year, month, 1)
        except ValueError:
            raise FormatError("invalid year-month", text) from None
        return cls(first), cls(first.replace(day=calendar.monthrange(year, month)[1]))

    @classmethod
    def from_instant(cls, instant: Instant) -> "WorkingDate":
        day = instant.date()
        if instant.time_of_day() < DAY_START:
            day -= dt.timedelta(days=1)
        return cls(day)

    @classmethod
    def today(cls, clock: Optional[Clock] = None) -> "WorkingDate":
        return cls.from_instant(Instant.now(clock))

    def and_hm(self, hour: int, minute: int) -> Instant:
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise FormatError("time out of range", f"{hour}:{minute:02d}")
        time = dt.time(hour, minute)
        day = self.value
        if time < DAY_START:
            day += dt.timedelta(days=1)
        return Instant(dt.datetime.combine(day, time))

    def shift(self, days: int) -> "WorkingDate":
        return WorkingDate(self.value + dt.timedelta(days=days))

    def to_date(self) -> dt.date:
        return self.value

    def __str__(self) -> str:
        return self.value.strftime(DATE_FORMAT)


__all__ = ["Instant", "WorkingDate", "format_duration", "DAY_START"]
