"""Command line interface.

Usage:
    worklog init                  # (Re)create the database
    worklog task register         # Register or update a task
    worklog task unregister       # Hide a task from selection lists
    worklog task ls [--all]       # List tasks
    worklog start [--date DATE]   # Start a task (alias: s)
    worklog end [--date DATE]     # End the running task (alias: e)
    worklog fix [--date DATE]     # Correct begin/end of a record
    worklog log [--all | --date DATE | --month YYYY-MM]
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, TextIO, TypeVar

from . import __version__, services, tables
from .clock import Clock
from .config import Settings, settings as default_settings
from .database import create_db_engine, ensure_database
from .errors import NotFoundError, WorklogError
from .prompt import Prompt
from .schemas import Record, Task
from .store import SqlStore, Store
from .timeutil import Instant, WorkingDate

logger = logging.getLogger(__name__)

T = TypeVar("T", Task, Record)

NEW_TASK = "new"


@dataclass
class Context:
    settings: Settings
    prompt: Prompt
    out: TextIO
    clock: Optional[Clock] = None
    store: Optional[Store] = None

    def open_store(self, read_only: bool = False) -> Store:
        if self.store is None:
            path = self.settings.sqlite_path
            if ensure_database(path):
                print(f"Database created: {path}", file=sys.stderr)
            self.store = SqlStore(create_db_engine(path, read_only=read_only))
        return self.store

    def emit(self, text: str = "") -> None:
        print(text, file=self.out)


def _choice_map(items: Sequence[T], reserved: Sequence[str] = ()) -> Dict[str, T]:
    """Key items by label; repeated labels get the row id appended."""
    labels = [item.label() for item in items]
    counts = Counter(list(reserved) + labels)
    return {f"{label} #{item.id}" if counts[label] > 1 else label: item for label, item in zip(labels, items)}


def _show_day(ctx: Context, store: Store, date: WorkingDate) -> None:
    ctx.emit(tables.record_list(store.records_for_date(date), ctx.clock, ctx.settings.name_separator))


def cmd_init(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store()
    if not ctx.prompt.confirm("Initializing existing database? Warning: all existing data will be deleted", False):
        return 0
    print("Initializing database... ", end="", file=sys.stderr)
    store.initialize()
    print("Done.", file=sys.stderr)
    return 0


def cmd_task_register(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store()
    task_map = _choice_map(store.tasks(), reserved=[NEW_TASK])
    choice = ctx.prompt.select([NEW_TASK] + list(task_map), "Select new or updating task:")
    is_new = choice == NEW_TASK
    task = Task() if is_new else task_map[choice]

    for index, current in enumerate(task.levels):
        if ctx.prompt.confirm(f"Set level {index + 1} ({current or ''})?", is_new):
            value = ctx.prompt.text(">")
            task = task.with_level(index, value or None)

    if ctx.prompt.confirm("Set description?", is_new):
        task = task.model_copy(update={"description": ctx.prompt.text(">")})

    task = task.model_copy(
        update={
            "is_break": ctx.prompt.confirm("Break time?", task.is_break),
            "is_active": ctx.prompt.confirm("Active task?", task.is_active),
        }
    )
    services.register_task(store, task)
    return 0


def cmd_task_unregister(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store()
    task_map = _choice_map(services.list_tasks(store))
    choice = ctx.prompt.select(list(task_map), "Select task:")
    if ctx.prompt.confirm("Unregister?", False):
        services.unregister_task(store, task_map[choice])
    return 0


def cmd_task_ls(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store(read_only=True)
    ctx.emit(tables.task_list(services.list_tasks(store, show_all=args.all)))
    return 0


def cmd_start(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store()
    date = services.resolve_date(args.date, ctx.clock)
    now = Instant.now(ctx.clock)
    task_map = _choice_map(services.list_tasks(store))
    choice = ctx.prompt.select(list(task_map), "Select task:")
    begin = ctx.prompt.parsed("Begin time:", lambda text: Instant.parse_with_date(date, text), now.to_hm())
    services.start_task(store, task_map[choice], date, begin)
    _show_day(ctx, store, date)
    return 0


def cmd_end(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store()
    date = services.resolve_date(args.date, ctx.clock)
    if store.current_open_record(date) is None:
        raise NotFoundError(f"No running record on {date}")
    now = Instant.now(ctx.clock)
    end = ctx.prompt.parsed("End time:", lambda text: Instant.parse_with_date(date, text), now.to_hm())
    services.end_task(store, date, end)
    _show_day(ctx, store, date)
    return 0


def cmd_fix(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store()
    date = services.resolve_date(args.date, ctx.clock)
    record_map = _choice_map(store.records_for_date(date))
    record = record_map[ctx.prompt.select(list(record_map), "Select record:")]

    def parse_end(text: str) -> Optional[Instant]:
        return None if text in ("", "-") else Instant.parse_with_date(date, text)

    begin = ctx.prompt.parsed("Begin time:", lambda text: Instant.parse_with_date(date, text), record.begin.to_hm())
    end = ctx.prompt.parsed("End time (- while running):", parse_end, record.end.to_hm() if record.end is not None else "")
    services.fix_record(store, record, begin, end)
    _show_day(ctx, store, date)
    return 0


def cmd_log(ctx: Context, args: argparse.Namespace) -> int:
    store = ctx.open_store(read_only=True)
    sep = ctx.settings.name_separator
    selection = services.collect_records(store, args.date, args.month, args.all, ctx.clock)
    ctx.emit(tables.record_list(selection.records, ctx.clock, sep))
    if selection.scope == services.SCOPE_ALL:
        return 0

    summary = tables.summarize(selection.records, ctx.clock, sep)
    if selection.scope == services.SCOPE_MONTH:
        durations = tables.task_durations(summary)
        if durations:
            ctx.emit("\n Summary")
            ctx.emit(durations)
        return 0

    overview = tables.task_summary(summary)
    if overview:
        ctx.emit("\n Summary")
        ctx.emit(overview)
    durations = tables.task_durations(summary)
    if durations:
        ctx.emit(durations)
    breaks = tables.break_times(summary, sep)
    if breaks:
        ctx.emit("\n Break")
        ctx.emit(breaks)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="worklog", description="Personal work-time logger")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("init", help="Initialize database")
    p.set_defaults(handler=cmd_init)

    p = subparsers.add_parser("task", help="Manipulate a task")
    task_commands = p.add_subparsers(dest="task_command", required=True)
    t = task_commands.add_parser("register", help="Register or update a task")
    t.set_defaults(handler=cmd_task_register)
    t = task_commands.add_parser("unregister", help="Unregister a task")
    t.set_defaults(handler=cmd_task_unregister)
    t = task_commands.add_parser("ls", help="List active tasks")
    t.add_argument("-a", "--all", action="store_true", help="Print all tasks")
    t.set_defaults(handler=cmd_task_ls)

    for name, alias, help_text, handler in (
        ("start", "s", "Start task", cmd_start),
        ("end", "e", "End task", cmd_end),
        ("fix", None, "Fix time", cmd_fix),
    ):
        p = subparsers.add_parser(name, aliases=[alias] if alias else [], help=help_text)
        p.add_argument("-d", "--date", metavar="DATE", help="Specify target date")
        p.set_defaults(handler=handler)

    p = subparsers.add_parser("log", help="Print records")
    scope = p.add_mutually_exclusive_group()
    scope.add_argument("-a", "--all", action="store_true", help="Print all records")
    scope.add_argument("-d", "--date", metavar="DATE", help="Print records with the specified date")
    scope.add_argument("-m", "--month", metavar="MONTH", help="Print records with the specified month")
    p.set_defaults(handler=cmd_log)

    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(
    argv: Optional[List[str]] = None,
    *,
    store: Optional[Store] = None,
    prompt: Optional[Prompt] = None,
    clock: Optional[Clock] = None,
    out: Optional[TextIO] = None,
    config: Optional[Settings] = None,
) -> int:
    args = build_parser().parse_args(argv)
    config = config or default_settings
    configure_logging("DEBUG" if args.verbose else config.log_level)
    ctx = Context(
        settings=config,
        prompt=prompt or Prompt(),
        out=out or sys.stdout,
        clock=clock,
        store=store,
    )
    handler: Callable[[Context, argparse.Namespace], int] = args.handler
    try:
        return handler(ctx, args)
    except WorklogError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
