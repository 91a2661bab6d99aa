from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .clock import Clock
from .errors import NotFoundError
from .schemas import Record, Task
from .store import Store
from .timeutil import Instant, WorkingDate

logger = logging.getLogger(__name__)

SCOPE_ALL = "all"
SCOPE_DAY = "day"
SCOPE_MONTH = "month"


@dataclass(slots=True)
class RecordSelection:
    records: List[Record]
    scope: str


def resolve_date(text: Optional[str], clock: Optional[Clock] = None) -> WorkingDate:
    if text:
        return WorkingDate.parse(text, clock)
    return WorkingDate.today(clock)


def start_task(store: Store, task: Task, date: WorkingDate, begin: Instant) -> Record:
    """Open a new record, ending the one currently running on ``date`` at ``begin``."""
    record = store.start_record(Record(task=task, working_date=date, begin=begin))
    logger.info("Started %s at %s", task.format_name(), begin.to_full_string())
    return record


def end_task(store: Store, date: WorkingDate, end: Instant) -> Record:
    current = store.current_open_record(date)
    if current is None:
        raise NotFoundError(f"No running record on {date}")
    record = store.add_record(current.model_copy(update={"end": end}))
    logger.info("Ended %s at %s", record.task.format_name(), end.to_full_string())
    return record


def fix_record(store: Store, record: Record, begin: Instant, end: Optional[Instant]) -> Record:
    fixed = record.model_copy(update={"begin": begin, "end": end})
    fixed.ensure_consistent()
    stored = store.add_record(fixed)
    logger.info("Fixed record %s", stored.id)
    return stored


def collect_records(
    store: Store,
    date: Optional[str] = None,
    month: Optional[str] = None,
    show_all: bool = False,
    clock: Optional[Clock] = None,
) -> RecordSelection:
    if show_all:
        return RecordSelection(store.all_records(), SCOPE_ALL)
    if date:
        return RecordSelection(store.records_for_date(WorkingDate.parse(date, clock)), SCOPE_DAY)
    if month:
        first, last = WorkingDate.parse_year_month(month)
        return RecordSelection(store.records_in_period(first, last), SCOPE_MONTH)
    return RecordSelection(store.records_for_date(WorkingDate.today(clock)), SCOPE_DAY)


def register_task(store: Store, task: Task) -> Task:
    stored = store.register_task(task)
    logger.info("Registered task %s (%s)", stored.id, stored.label())
    return stored


def unregister_task(store: Store, task: Task) -> None:
    if task.id is None:
        raise NotFoundError(f"Task {task.label()!r} is not registered")
    store.unregister_task(task.id)
    logger.info("Unregistered task %s", task.id)


def list_tasks(store: Store, show_all: bool = False) -> List[Task]:
    tasks = store.tasks()
    if show_all:
        return tasks
    return [task for task in tasks if task.is_active]
