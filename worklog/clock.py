from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional, Protocol


class Clock(Protocol):
    def now(self) -> dt.datetime:
        ...


class SystemClock:
    """Local wall clock."""

    def now(self) -> dt.datetime:
        return dt.datetime.now()


@dataclass(slots=True)
class FixedClock:
    """Clock frozen at ``moment`` until moved with :meth:`advance`."""

    moment: dt.datetime

    def now(self) -> dt.datetime:
        return self.moment

    def advance(self, minutes: int) -> None:
        self.moment = self.moment + dt.timedelta(minutes=minutes)


system_clock = SystemClock()


def resolve(clock: Optional[Clock]) -> Clock:
    return clock if clock is not None else system_clock


__all__ = ["Clock", "SystemClock", "FixedClock", "system_clock", "resolve"]
