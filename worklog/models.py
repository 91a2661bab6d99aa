from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Text
from sqlalchemy.dialects.sqlite import DATETIME
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Timestamps are stored without fractional seconds: ``YYYY-MM-DD HH:MM:SS``.
Timestamp = DATETIME(
    storage_format="%(year)04d-%(month)02d-%(day)02d %(hour)02d:%(minute)02d:%(second)02d"
)


class TaskRow(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    level1 = Column(Text, nullable=True)
    level2 = Column(Text, nullable=True)
    level3 = Column(Text, nullable=True)
    description = Column(Text, nullable=False, default="")
    is_break = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    records = relationship("RecordRow", back_populates="task")


class RecordRow(Base):
    __tablename__ = "records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    working_date = Column(Date, nullable=False, index=True)
    begin = Column(Timestamp, nullable=False)
    end = Column(Timestamp, nullable=True)

    task = relationship("TaskRow", back_populates="records", lazy="joined")
