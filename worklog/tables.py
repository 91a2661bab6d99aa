"""Plain-text tables for the command line output."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .clock import Clock
from .schemas import Record, Task
from .summary import Summary
from .timeutil import Instant, format_duration


def render_table(headers: Sequence[str], rows: Iterable[Sequence[str]], right: Sequence[str] = ()) -> str:
    rows = [[str(cell) for cell in row] for row in rows]
    widths = [len(header) for header in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))

    def line(left: str, middle: str, end: str) -> str:
        return left + middle.join("─" * (width + 2) for width in widths) + end

    def cells(values: Sequence[str]) -> str:
        parts = []
        for header, value, width in zip(headers, values, widths):
            parts.append(f" {value.rjust(width) if header in right else value.ljust(width)} ")
        return "│" + "│".join(parts) + "│"

    output = [line("┌", "┬", "┐"), cells(headers), line("├", "┼", "┤")]
    output.extend(cells(row) for row in rows)
    output.append(line("└", "┴", "┘"))
    return "\n".join(output)


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def task_list(tasks: Sequence[Task]) -> str:
    rows = [
        [level or "" for level in task.levels] + [task.description, _yes_no(task.is_break), _yes_no(task.is_active)]
        for task in tasks
    ]
    return render_table(["Level 1", "Level 2", "Level 3", "Description", "Break time", "Active"], rows)


def record_list(records: Sequence[Record], clock: Optional[Clock] = None, sep: str = "/") -> str:
    if not records:
        return "No Records"
    now = Instant.now(clock)
    rows = [
        [
            str(record.working_date),
            record.begin.to_hm(),
            record.end.to_hm() if record.end is not None else "",
            format_duration(record.duration(now)),
            record.task.format_name(sep),
        ]
        for record in records
    ]
    return render_table(["Date", "Begin", "End  ", "Duration", "Task"], rows, right=["Duration"])


def summarize(records: Sequence[Record], clock: Optional[Clock] = None, sep: str = "/") -> Optional[Summary]:
    """Summary of ``records``, or ``None`` when there is no work record to summarize."""
    if not any(not record.is_break for record in records):
        return None
    return Summary.from_records(records, clock=clock, sep=sep)


def task_summary(summary: Optional[Summary]) -> str:
    if summary is None:
        return ""
    end = summary.end.to_hm() if summary.end is not None else ""
    row = [summary.begin.to_hm(), end, format_duration(summary.total_duration)]
    return render_table(["Begin", "End  ", "Duration"], [row], right=["Duration"])


def task_durations(summary: Optional[Summary]) -> str:
    if summary is None or not summary.task_durations:
        return ""
    rows = [[share.name, format_duration(share.duration), f"{share.percent:.1f}"] for share in summary.task_shares()]
    return render_table(["Task", "Duration", "%"], rows, right=["Duration", "%"])


def break_times(summary: Optional[Summary], sep: str = "/") -> str:
    if summary is None or not summary.break_times:
        return ""
    rows: List[List[str]] = []
    for record in summary.break_times:
        end = record.end.to_hm() if record.end is not None else ""
        rows.append([record.task.format_name(sep), f"{record.begin.to_hm()} - {end}"])
    return render_table(["Break", "Time"], rows)
