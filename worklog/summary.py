"""Aggregation of a reporting scope's records into totals and per-task durations."""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .clock import Clock
from .errors import LogicError
from .schemas import Record
from .timeutil import Instant


class TaskShare(BaseModel):
    name: str
    duration: dt.timedelta
    percent: float


class Summary(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    begin: Instant
    end: Optional[Instant]
    total_duration: dt.timedelta
    task_durations: Dict[str, dt.timedelta] = Field(default_factory=dict)
    break_times: List[Record] = Field(default_factory=list)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Record],
        clock: Optional[Clock] = None,
        sep: str = "/",
    ) -> "Summary":
        """Summarize the records of one scope.

        Break records only show up in ``break_times``. ``end`` is the latest end
        among the work records that have one, so a still running record does not
        hide the end of the ones finished before it. Running records count up to
        a single ``now`` taken here.
        """
        records = list(records)
        work_records = [record for record in records if not record.is_break]
        if not work_records:
            raise LogicError("no work records to summarize")

        now = Instant.now(clock)
        begin = min(record.begin for record in work_records)
        ends = [record.end for record in work_records if record.end is not None]
        end = max(ends) if ends else None

        total = dt.timedelta(0)
        task_durations: Dict[str, dt.timedelta] = defaultdict(dt.timedelta)
        for record in work_records:
            duration = record.duration(now)
            total += duration
            task_durations[record.task.format_name(sep)] += duration

        return cls(
            begin=begin,
            end=end,
            total_duration=total,
            task_durations=dict(task_durations),
            break_times=[record for record in records if record.is_break],
        )

    def task_shares(self) -> List[TaskShare]:
        """Per-task durations with their share of the total, longest first."""
        total_minutes = sum(int(d.total_seconds() / 60) for d in self.task_durations.values())
        shares: List[TaskShare] = []
        for name, duration in self.task_durations.items():
            minutes = int(duration.total_seconds() / 60)
            percent = minutes / total_minutes * 100 if total_minutes else 0.0
            shares.append(TaskShare(name=name, duration=duration, percent=percent))
        shares.sort(key=lambda share: (-share.duration, share.name))
        return shares


__all__ = ["Summary", "TaskShare"]
