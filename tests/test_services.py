from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy.exc import IntegrityError

from worklog import services
from worklog.clock import FixedClock
from worklog.errors import FormatError, LogicError, NotFoundError
from worklog.schemas import Task
from worklog.store import SqlStore
from worklog.timeutil import Instant, WorkingDate


def at(date: WorkingDate, hm: str) -> Instant:
    return Instant.parse_with_date(date, hm)


def test_resolve_date(clock: FixedClock):
    assert services.resolve_date("2021-03-04") == WorkingDate.parse("2021-03-04")
    assert services.resolve_date(None, clock) == WorkingDate.parse("2021-01-01")
    with pytest.raises(FormatError):
        services.resolve_date("2021-3-4")


def test_start_task_opens_record(store: SqlStore, registered_tasks, sample_day):
    dev = registered_tasks[0]
    record = services.start_task(store, dev, sample_day, at(sample_day, "0900"))

    assert record.id is not None
    assert record.is_open
    assert store.current_open_record(sample_day) == record


def test_start_task_closes_running_record(store: SqlStore, registered_tasks, sample_day):
    dev, meeting, _ = registered_tasks
    first = services.start_task(store, dev, sample_day, at(sample_day, "0900"))
    second = services.start_task(store, meeting, sample_day, at(sample_day, "1030"))

    records = store.records_for_date(sample_day)
    assert [record.id for record in records] == [first.id, second.id]
    assert records[0].end == at(sample_day, "1030")
    assert records[1].is_open


def test_start_task_before_running_begin_is_rejected(store: SqlStore, registered_tasks, sample_day):
    dev, meeting, _ = registered_tasks
    services.start_task(store, dev, sample_day, at(sample_day, "1000"))

    with pytest.raises(LogicError):
        services.start_task(store, meeting, sample_day, at(sample_day, "0930"))
    assert len(store.records_for_date(sample_day)) == 1


def test_rejected_start_leaves_running_record_open(store: SqlStore, registered_tasks, sample_day):
    running = services.start_task(store, registered_tasks[0], sample_day, at(sample_day, "0900"))

    with pytest.raises(LogicError):
        services.start_task(store, Task.new("unsaved"), sample_day, at(sample_day, "1000"))
    with pytest.raises(IntegrityError):
        services.start_task(store, Task.new("gone", id=99), sample_day, at(sample_day, "1000"))

    assert store.current_open_record(sample_day) == running
    assert store.records_for_date(sample_day) == [running]


def test_start_after_midnight_stays_on_working_day(store: SqlStore, registered_tasks, sample_day):
    dev = registered_tasks[0]
    record = services.start_task(store, dev, sample_day, at(sample_day, "0130"))

    assert record.begin == Instant.parse_full("2021-01-02T01:30:00")
    assert store.records_for_date(sample_day) == [record]


def test_end_task(store: SqlStore, registered_tasks, sample_day):
    dev = registered_tasks[0]
    services.start_task(store, dev, sample_day, at(sample_day, "0900"))
    ended = services.end_task(store, sample_day, at(sample_day, "1200"))

    assert ended.end == at(sample_day, "1200")
    assert store.current_open_record(sample_day) is None


def test_end_task_without_running_record(store: SqlStore, sample_day):
    with pytest.raises(NotFoundError):
        services.end_task(store, sample_day, at(sample_day, "1200"))


def test_end_task_before_begin_is_rejected(store: SqlStore, registered_tasks, sample_day):
    services.start_task(store, registered_tasks[0], sample_day, at(sample_day, "0900"))
    with pytest.raises(LogicError):
        services.end_task(store, sample_day, at(sample_day, "0800"))
    assert store.current_open_record(sample_day) is not None


def test_fix_record(store: SqlStore, registered_tasks, sample_day):
    record = services.start_task(store, registered_tasks[0], sample_day, at(sample_day, "0900"))
    fixed = services.fix_record(store, record, at(sample_day, "0845"), at(sample_day, "1115"))

    assert fixed.id == record.id
    assert store.records_for_date(sample_day) == [fixed]
    assert fixed.duration() == dt.timedelta(hours=2, minutes=30)

    with pytest.raises(LogicError):
        services.fix_record(store, fixed, at(sample_day, "1200"), at(sample_day, "1100"))
    assert store.records_for_date(sample_day) == [fixed]


def test_fix_record_can_reopen(store: SqlStore, registered_tasks, sample_day):
    record = services.start_task(store, registered_tasks[0], sample_day, at(sample_day, "0900"))
    ended = services.end_task(store, sample_day, at(sample_day, "1000"))
    reopened = services.fix_record(store, ended, record.begin, None)
    assert reopened.is_open


def test_collect_records_scopes(store: SqlStore, registered_tasks, clock: FixedClock):
    dev = registered_tasks[0]
    for day in ("2021-01-01", "2021-01-02", "2021-02-01"):
        date = WorkingDate.parse(day)
        services.start_task(store, dev, date, at(date, "0900"))
        services.end_task(store, date, at(date, "1000"))

    today = services.collect_records(store, clock=clock)
    assert today.scope == services.SCOPE_DAY
    assert [str(record.working_date) for record in today.records] == ["2021-01-01"]

    day = services.collect_records(store, date="0102", clock=clock)
    assert [str(record.working_date) for record in day.records] == ["2021-01-02"]

    month = services.collect_records(store, month="2021-01")
    assert month.scope == services.SCOPE_MONTH
    assert len(month.records) == 2

    everything = services.collect_records(store, show_all=True)
    assert everything.scope == services.SCOPE_ALL
    assert len(everything.records) == 3


def test_task_registration_workflow(store: SqlStore):
    task = services.register_task(store, Task.new("dev", "api"))
    services.register_task(store, Task.new("ops"))
    services.unregister_task(store, task)

    assert [t.format_name() for t in services.list_tasks(store)] == ["ops"]
    assert [t.format_name() for t in services.list_tasks(store, show_all=True)] == ["dev/api", "ops"]
    with pytest.raises(NotFoundError):
        services.unregister_task(store, Task.new("never saved"))
