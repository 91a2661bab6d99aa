"""Tolerant parsers for the time, date and year-month strings users type.

Each parser accepts a separated form (``05:30``, ``2021-01-01``, ``2021-04``)
and a compact form (``530``, ``20210101``, ``202104``). Compact input is split
by fixed field widths; the range rules live in the patterns themselves, so a
string such as ``2410`` or ``2021-13-31`` simply does not match.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from .clock import Clock, resolve
from .errors import FormatError

TIME_RE = re.compile(r"([0-9]|[01][0-9]|2[0-3]):?([0-5][0-9])")
DATE_RE = re.compile(r"(([0-9]{4})-?)?(0[1-9]|1[0-2])-?(0[1-9]|[12][0-9]|3[01])")
YEAR_MONTH_RE = re.compile(r"([0-9]{4})-?(0[1-9]|1[0-2])")


def _match(pattern: re.Pattern[str], text: Optional[str], what: str) -> re.Match[str]:
    if text is None:
        raise FormatError(f"missing {what}")
    candidate = text.strip()
    if not candidate:
        raise FormatError(f"empty {what}", text)
    match = pattern.fullmatch(candidate)
    if match is None:
        raise FormatError(f"invalid {what}", text)
    return match


def parse_time_hm(text: str) -> Tuple[int, int]:
    """Parse ``HH:MM``, ``H:MM``, ``HHMM`` or ``HMM`` into ``(hour, minute)``."""
    match = _match(TIME_RE, text, "time")
    return int(match.group(1)), int(match.group(2))


def parse_date(text: str, clock: Optional[Clock] = None) -> Tuple[int, int, int]:
    """Parse ``YYYY-MM-DD``, ``YYYYMMDD``, ``MM-DD`` or ``MMDD`` into ``(year, month, day)``.

    The year defaults to the current local year when omitted.
    """
    match = _match(DATE_RE, text, "date")
    year = match.group(2)
    if year is None:
        current_year = resolve(clock).now().year
    else:
        current_year = int(year)
    return current_year, int(match.group(3)), int(match.group(4))


def parse_year_month(text: str) -> Tuple[int, int]:
    """Parse ``YYYY-MM`` or ``YYYYMM`` into ``(year, month)``."""
    match = _match(YEAR_MONTH_RE, text, "year-month")
    return int(match.group(1)), int(match.group(2))


__all__ = ["parse_time_hm", "parse_date", "parse_year_month"]
