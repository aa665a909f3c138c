"""Progress reporting for dump runs."""

from __future__ import annotations

import threading
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from sfdump.cli.common.output import console as default_console
from sfdump.core.dump import DumpListener
from sfdump.core.objects import DumpFailure, DumpReport, SchemaObjectDescriptor, Target

_MAX_LABEL_WIDTH = 64


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _location_label(*names: str) -> str:
    """Render catalog names as `[a].[b]`, capped for one console line."""
    return _truncate(".".join(f"[{n}]" for n in names), _MAX_LABEL_WIDTH)


class DumpProgress(DumpListener):
    """
    Live progress for a dump, one row per target:
      - schemas completed out of schemas found so far
      - objects written and failures recorded
      - elapsed time

    Messages for databases, schemas and (with verbose) files are printed
    above the live rows. Notifications arrive from worker threads.
    """

    def __init__(self, *, verbose: bool = False, console: Console | None = None):
        self.verbose = verbose
        self.console = console or default_console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.fields[target]}[/]"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("schemas"),
            TextColumn("objects=[green]{task.fields[objects]}[/]"),
            TextColumn("failures=[bold red]{task.fields[failures]}[/]"),
            TimeElapsedColumn(),
            console=self.console,
        )
        self._lock = threading.Lock()
        self._task_ids: dict[str, TaskID] = {}
        self.objects: dict[str, int] = {}
        self.failures: dict[str, int] = {}
        self.schemas_total: dict[str, int] = {}

    def __enter__(self) -> DumpProgress:
        self.progress.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.progress.stop()

    def _print(self, msg: str) -> None:
        self.progress.console.print(msg)

    def target_started(self, target: Target) -> None:
        with self._lock:
            self.objects[target.name] = 0
            self.failures[target.name] = 0
            self.schemas_total[target.name] = 0
            self._task_ids[target.name] = self.progress.add_task(
                "dump",
                total=None,
                target=escape(target.name),
                objects=0,
                failures=0,
            )
        self._print(f"[title]›[/] Processing section {escape(_location_label(target.name))}")

    def databases_found(self, target: Target, databases: list[str]) -> None:
        self._print(
            f"[title]›[/] {escape(_location_label(target.name))} "
            f"{len(databases)} database(s) found"
        )

    def schemas_found(self, target: Target, database: str, schemas: list[str]) -> None:
        with self._lock:
            self.schemas_total[target.name] += len(schemas)
            self.progress.update(
                self._task_ids[target.name], total=self.schemas_total[target.name]
            )
        self._print(
            f"[meta]{escape(_location_label(database))} "
            f"{len(schemas)} schema(s)[/]"
        )

    def objects_found(
        self,
        target: Target,
        database: str,
        schema: str,
        objects: list[SchemaObjectDescriptor],
    ) -> None:
        if self.verbose:
            self._print(
                f"[meta]{escape(_location_label(database, schema))} "
                f"{len(objects)} object(s) found[/]"
            )

    def object_written(
        self,
        target: Target,
        database: str,
        schema: str,
        obj: SchemaObjectDescriptor,
        path: Path,
    ) -> None:
        with self._lock:
            self.objects[target.name] += 1
            self.progress.update(
                self._task_ids[target.name], objects=self.objects[target.name]
            )
        if self.verbose:
            self._print(f"[meta]{escape(str(path))}[/]")

    def schema_done(self, target: Target, database: str, schema: str) -> None:
        self.progress.advance(self._task_ids[target.name], 1)

    def failure_recorded(self, failure: DumpFailure) -> None:
        with self._lock:
            self.failures[failure.target] = self.failures.get(failure.target, 0) + 1
            task_id = self._task_ids.get(failure.target)
            if task_id is not None:
                self.progress.update(task_id, failures=self.failures[failure.target])
        self._print(
            f"[warn]⚠[/] {escape(failure.operation)} {escape(failure.location)}: "
            f"{escape(failure.error)}"
        )

    def target_done(self, report: DumpReport) -> None:
        task_id = self._task_ids[report.target]
        with self._lock:
            total = self.schemas_total[report.target]
        self.progress.update(task_id, total=total, completed=total)
