from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Generator, List

import pytest

from worklog.clock import FixedClock
from worklog.database import create_db_engine, initialize
from worklog.schemas import Record, Task
from worklog.store import SqlStore
from worklog.timeutil import Instant, WorkingDate


@pytest.fixture()
def temp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture()
def engine(temp_db_path: Path) -> Generator:
    engine = create_db_engine(temp_db_path)
    initialize(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine) -> SqlStore:
    return SqlStore(engine)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(dt.datetime(2021, 1, 1, 18, 0, 42))


@pytest.fixture()
def sample_day() -> WorkingDate:
    return WorkingDate(dt.date(2021, 1, 1))


@pytest.fixture()
def registered_tasks(store: SqlStore) -> List[Task]:
    return [
        store.register_task(Task.new("dev", "api", None, "backend work")),
        store.register_task(Task.new("meeting", None, None)),
        store.register_task(Task.new("lunch", is_break=True)),
    ]


def _make_record(task: Task, begin: str, end: str | None = None, record_id: int | None = None) -> Record:
    begin_at = Instant.parse_full(begin)
    return Record(
        id=record_id,
        task=task,
        working_date=WorkingDate.from_instant(begin_at),
        begin=begin_at,
        end=Instant.parse_full(end) if end else None,
    )


@pytest.fixture()
def make_record():
    return _make_record
