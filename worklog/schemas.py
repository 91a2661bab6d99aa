from __future__ import annotations

import datetime as dt
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import LogicError
from .timeutil import Instant, WorkingDate

TaskLevels = Tuple[Optional[str], Optional[str], Optional[str]]

LEVEL_COUNT = 3


class Task(BaseModel):
    """A node of the three-level task taxonomy.

    ``levels`` always has three slots. An unset slot stays ``None`` even when a
    later slot is set, so ``(None, "review", None)`` is a valid name.
    """

    id: Optional[int] = None
    levels: TaskLevels = (None, None, None)
    description: str = ""
    is_break: bool = False
    is_active: bool = True

    @field_validator("levels", mode="before")
    @classmethod
    def _pad_levels(cls, value):
        if value is None:
            return (None,) * LEVEL_COUNT
        items = list(value)
        if len(items) > LEVEL_COUNT:
            raise ValueError(f"a task has at most {LEVEL_COUNT} name levels")
        return tuple(items + [None] * (LEVEL_COUNT - len(items)))

    @classmethod
    def new(
        cls,
        level1: Optional[str] = None,
        level2: Optional[str] = None,
        level3: Optional[str] = None,
        description: str = "",
        is_break: bool = False,
        is_active: bool = True,
        id: Optional[int] = None,
    ) -> "Task":
        return cls(
            id=id,
            levels=(level1, level2, level3),
            description=description,
            is_break=is_break,
            is_active=is_active,
        )

    def format_name(self, sep: str = "/") -> str:
        return sep.join(level for level in self.levels if level)

    def label(self) -> str:
        name = self.format_name("/")
        if self.description:
            name += f" - {self.description}"
        return name

    def with_level(self, index: int, value: Optional[str]) -> "Task":
        levels = list(self.levels)
        levels[index] = value
        return self.model_copy(update={"levels": tuple(levels)})


class Record(BaseModel):
    """One logged interval. ``end`` is ``None`` while the task is still running."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[int] = None
    task: Task
    working_date: WorkingDate
    begin: Instant
    end: Optional[Instant] = None

    @property
    def is_break(self) -> bool:
        return self.task.is_break

    @property
    def is_open(self) -> bool:
        return self.end is None

    def duration(self, now: Optional[Instant] = None) -> dt.timedelta:
        if self.end is not None:
            return self.end - self.begin
        if now is None:
            now = Instant.now()
        return now - self.begin

    def ensure_consistent(self) -> None:
        if self.end is not None and self.end < self.begin:
            raise LogicError(
                f"end time {self.end.to_full_string()} is earlier than "
                f"begin time {self.begin.to_full_string()}"
            )

    def label(self) -> str:
        end = self.end.to_hm() if self.end is not None else ""
        return f"{self.working_date}  {self.begin.to_hm()} - {end:5}  {self.task.format_name('/')}"


__all__ = ["Task", "TaskLevels", "Record"]
