"""Persistence of tasks and records.

The rest of the package only talks to the :class:`Store` protocol; ``SqlStore``
is the SQLite implementation used by the command line tool.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Query, Session

from .database import create_session_factory, db_session
from .database import initialize as initialize_tables
from .database import is_ready as tables_ready
from .errors import LogicError, NotFoundError
from .models import RecordRow, TaskRow
from .schemas import Record, Task
from .timeutil import Instant, WorkingDate

logger = logging.getLogger(__name__)


class Store(Protocol):
    def is_ready(self) -> bool:
        ...

    def initialize(self) -> None:
        ...

    def register_task(self, task: Task) -> Task:
        ...

    def unregister_task(self, task_id: int) -> None:
        ...

    def tasks(self) -> List[Task]:
        ...

    def get_task(self, task_id: int) -> Task:
        ...

    def current_open_record(self, date: WorkingDate) -> Optional[Record]:
        ...

    def add_record(self, record: Record) -> Record:
        ...

    def start_record(self, record: Record) -> Record:
        ...

    def delete_record(self, record_id: int) -> None:
        ...

    def all_records(self) -> List[Record]:
        ...

    def records_for_date(self, date: WorkingDate) -> List[Record]:
        ...

    def records_in_period(self, start: WorkingDate, end: WorkingDate) -> List[Record]:
        ...


def _task_from_row(row: TaskRow) -> Task:
    return Task(
        id=row.id,
        levels=(row.level1, row.level2, row.level3),
        description=row.description or "",
        is_break=bool(row.is_break),
        is_active=bool(row.is_active),
    )


def _record_from_row(row: RecordRow) -> Record:
    return Record(
        id=row.id,
        task=_task_from_row(row.task),
        working_date=WorkingDate(row.working_date),
        begin=Instant(row.begin),
        end=Instant(row.end) if row.end is not None else None,
    )


def _apply_task(row: TaskRow, task: Task) -> None:
    row.level1, row.level2, row.level3 = task.levels
    row.description = task.description
    row.is_break = task.is_break
    row.is_active = task.is_active


def _apply_record(row: RecordRow, record: Record) -> None:
    row.task_id = record.task.id
    row.working_date = record.working_date.to_date()
    row.begin = record.begin.to_datetime()
    row.end = record.end.to_datetime() if record.end is not None else None


def _check_record(record: Record) -> None:
    record.ensure_consistent()
    if record.task.id is None:
        raise LogicError("Cannot log time against an unregistered task")


class SqlStore:
    """SQLAlchemy backed store; every call runs in its own short session."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._factory = create_session_factory(engine)

    def is_ready(self) -> bool:
        return tables_ready(self.engine)

    def initialize(self) -> None:
        initialize_tables(self.engine)

    # Tasks

    def register_task(self, task: Task) -> Task:
        with db_session(self._factory) as session:
            if task.id is None:
                row = TaskRow()
                session.add(row)
            else:
                row = session.get(TaskRow, task.id)
                if row is None:
                    raise NotFoundError(f"Task {task.id} not found")
            _apply_task(row, task)
            session.flush()
            logger.debug("Stored task %s (%s)", row.id, task.format_name())
            return _task_from_row(row)

    def unregister_task(self, task_id: int) -> None:
        with db_session(self._factory) as session:
            row = session.get(TaskRow, task_id)
            if row is None:
                raise NotFoundError(f"Task {task_id} not found")
            row.is_active = False
            logger.debug("Deactivated task %s", task_id)

    def tasks(self) -> List[Task]:
        with db_session(self._factory) as session:
            rows = (
                session.query(TaskRow)
                .order_by(TaskRow.level1.asc(), TaskRow.level2.asc(), TaskRow.level3.asc(), TaskRow.id.asc())
                .all()
            )
            return [_task_from_row(row) for row in rows]

    def get_task(self, task_id: int) -> Task:
        with db_session(self._factory) as session:
            row = session.get(TaskRow, task_id)
            if row is None:
                raise NotFoundError(f"Task {task_id} not found")
            return _task_from_row(row)

    # Records

    @staticmethod
    def _records(session: Session) -> Query:
        return session.query(RecordRow).order_by(RecordRow.working_date.asc(), RecordRow.begin.asc(), RecordRow.id.asc())

    def current_open_record(self, date: WorkingDate) -> Optional[Record]:
        with db_session(self._factory) as session:
            row = (
                session.query(RecordRow)
                .filter(RecordRow.working_date == date.to_date())
                .order_by(RecordRow.begin.desc(), RecordRow.id.desc())
                .first()
            )
            if row is None or row.end is not None:
                return None
            return _record_from_row(row)

    def add_record(self, record: Record) -> Record:
        _check_record(record)
        with db_session(self._factory) as session:
            if record.id is None:
                row = RecordRow()
                session.add(row)
            else:
                row = session.get(RecordRow, record.id)
                if row is None:
                    raise NotFoundError(f"Record {record.id} not found")
            _apply_record(row, record)
            session.flush()
            session.refresh(row)
            logger.debug("Stored record %s on %s", row.id, record.working_date)
            return _record_from_row(row)

    def start_record(self, record: Record) -> Record:
        """Insert ``record`` as running, ending the open record of its date at its begin.

        Both writes share one session, so a rejected insert leaves the open record running.
        """
        _check_record(record)
        with db_session(self._factory) as session:
            current = (
                session.query(RecordRow)
                .filter(RecordRow.working_date == record.working_date.to_date())
                .order_by(RecordRow.begin.desc(), RecordRow.id.desc())
                .first()
            )
            if current is not None and current.end is None:
                if record.begin.to_datetime() < current.begin:
                    raise LogicError(
                        f"Begin time {record.begin.to_hm()} is earlier than the running record's begin "
                        f"{Instant(current.begin).to_hm()}"
                    )
                current.end = record.begin.to_datetime()
                logger.debug("Closed record %s at %s", current.id, record.begin.to_full_string())
            row = RecordRow()
            session.add(row)
            _apply_record(row, record)
            session.flush()
            session.refresh(row)
            logger.debug("Started record %s on %s", row.id, record.working_date)
            return _record_from_row(row)

    def delete_record(self, record_id: int) -> None:
        with db_session(self._factory) as session:
            row = session.get(RecordRow, record_id)
            if row is None:
                raise NotFoundError(f"Record {record_id} not found")
            session.delete(row)
            logger.debug("Deleted record %s", record_id)

    def all_records(self) -> List[Record]:
        with db_session(self._factory) as session:
            return [_record_from_row(row) for row in self._records(session).all()]

    def records_for_date(self, date: WorkingDate) -> List[Record]:
        with db_session(self._factory) as session:
            rows = self._records(session).filter(RecordRow.working_date == date.to_date()).all()
            return [_record_from_row(row) for row in rows]

    def records_in_period(self, start: WorkingDate, end: WorkingDate) -> List[Record]:
        with db_session(self._factory) as session:
            rows = (
                self._records(session)
                .filter(RecordRow.working_date >= start.to_date(), RecordRow.working_date <= end.to_date())
                .all()
            )
            return [_record_from_row(row) for row in rows]


__all__ = ["Store", "SqlStore"]
