"""Core dump orchestration.

This module drives the walk database → schema → object for each target and
writes every object's DDL through the PathAllocator. It has no CLI
concerns: progress is reported through a DumpListener and errors are
raised (fail-fast) or collected into the DumpReport (best-effort).

Concurrency model: one task per database and, submitted from inside it, one
task per schema, all on a single bounded thread pool per target. Database
tasks never wait on their schema tasks; the calling thread joins the growing
set of futures until none is pending, so nested fan-out cannot starve the
pool. Objects of one schema are processed sequentially in catalog order:

    Discovered → SignatureNormalized → DdlFetched → PathResolved → Written

All tasks of a target share the target's connection.
"""

from __future__ import annotations

import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from sfdump.core.catalog import (
    QueryRunner,
    is_system_schema,
    list_databases,
    list_objects,
    list_schemas,
)
from sfdump.core.ddl import fetch_definition
from sfdump.core.errors import SfdumpError
from sfdump.core.objects import DumpFailure, DumpReport, SchemaObjectDescriptor, Target
from sfdump.core.paths import PathAllocator

DEFAULT_MAX_PARALLEL = 8


@dataclass(frozen=True)
class DumpOptions:
    """
    Options controlling a dump run.

    Attributes:
        max_parallel: Maximum number of database/schema tasks running at once.
        fail_fast: Stop the whole run on the first error (default). When
            False, failures are recorded in the report and sibling work
            continues.
    """

    max_parallel: int = DEFAULT_MAX_PARALLEL
    fail_fast: bool = True

    def __post_init__(self) -> None:
        if self.max_parallel < 1:
            raise ValueError("max_parallel must be >= 1")


class ClosableRunner(QueryRunner, Protocol):
    """A query runner owning a connection that must be closed."""

    def close(self) -> None:
        """Close the underlying connection."""
        ...


class DumpListener:
    """
    Receives progress notifications from a dump.

    Methods may be called from worker threads. The base class ignores every
    notification; frontends override what they display.
    """

    def target_started(self, target: Target) -> None:
        """A target is about to be dumped."""

    def databases_found(self, target: Target, databases: list[str]) -> None:
        """Databases of a target have been listed."""

    def schemas_found(self, target: Target, database: str, schemas: list[str]) -> None:
        """Schemas to dump in a database have been listed."""

    def objects_found(
        self,
        target: Target,
        database: str,
        schema: str,
        objects: list[SchemaObjectDescriptor],
    ) -> None:
        """Objects of a schema have been listed."""

    def object_written(
        self,
        target: Target,
        database: str,
        schema: str,
        obj: SchemaObjectDescriptor,
        path: Path,
    ) -> None:
        """An object's DDL has been written."""

    def schema_done(self, target: Target, database: str, schema: str) -> None:
        """All objects of a schema have been processed."""

    def failure_recorded(self, failure: DumpFailure) -> None:
        """A failure was recorded in best-effort mode."""

    def target_done(self, report: DumpReport) -> None:
        """A target has been dumped completely."""


class _TargetDump:
    """Runs the fan-out for one target and joins it."""

    def __init__(
        self,
        target: Target,
        runner: QueryRunner,
        paths: PathAllocator,
        options: DumpOptions,
        listener: DumpListener,
    ) -> None:
        self.target = target
        self.runner = runner
        self.paths = paths
        self.options = options
        self.listener = listener
        self.report = DumpReport(target=target.name)

        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._pending: set[Future] = set()
        self._error: BaseException | None = None
        self._pool: ThreadPoolExecutor | None = None

    def run(self) -> DumpReport:
        try:
            ddl_root = self.paths.create_sub_folder(self.target.ddl_folder)
            self.report.ddl_folder = str(ddl_root)
            databases = list_databases(self.runner)
        except SfdumpError as exc:
            self._tolerate(exc, "dump target", f"[{self.target.name}]")
            return self.report

        self.report.databases = len(databases)
        self.listener.databases_found(self.target, databases)

        with ThreadPoolExecutor(
            max_workers=self.options.max_parallel,
            thread_name_prefix=f"sfdump-{self.target.name}",
        ) as pool:
            self._pool = pool
            for database in databases:
                self._submit(self._dump_database, database)
            self._join()

        if self._error is not None:
            raise self._error
        return self.report

    def _submit(self, fn: Callable[..., None], *args: str) -> None:
        """Schedule a task unless the run has been stopped."""
        with self._lock:
            if self._stopped.is_set() or self._pool is None:
                return
            self._pending.add(self._pool.submit(self._run_task, fn, *args))

    def _run_task(self, fn: Callable[..., None], *args: str) -> None:
        if self._stopped.is_set():
            return
        try:
            fn(*args)
        except BaseException as exc:
            self._abort(exc)
            raise

    def _abort(self, exc: BaseException) -> None:
        """Keep the first error, stop new work and cancel queued tasks."""
        with self._lock:
            if self._error is None:
                self._error = exc
            self._stopped.set()
            for future in self._pending:
                future.cancel()

    def _join(self) -> None:
        """Wait until no task is pending, including tasks spawned meanwhile."""
        while True:
            with self._lock:
                pending = set(self._pending)
            if not pending:
                return
            done, _ = wait(pending, return_when=FIRST_EXCEPTION)
            with self._lock:
                self._pending -= done

    def _tolerate(self, exc: SfdumpError, operation: str, location: str) -> None:
        """Re-raise in fail-fast mode, otherwise record the failure."""
        if self.options.fail_fast:
            raise exc
        failure = DumpFailure(
            target=self.target.name,
            operation=operation,
            location=location,
            error=str(exc),
        )
        with self._lock:
            self.report.failures.append(failure)
        self.listener.failure_recorded(failure)

    def _dump_database(self, database: str) -> None:
        try:
            self.paths.create_sub_folder(self.target.ddl_folder, database)
            schemas = [
                s for s in list_schemas(self.runner, database) if not is_system_schema(s)
            ]
        except SfdumpError as exc:
            self._tolerate(exc, "dump database", f"[{database}]")
            return

        self.listener.schemas_found(self.target, database, schemas)
        for schema in schemas:
            self._submit(self._dump_schema, database, schema)

    def _dump_schema(self, database: str, schema: str) -> None:
        try:
            self.paths.create_sub_folder(self.target.ddl_folder, database, schema)
            objects = list_objects(self.runner, database, schema)
        except SfdumpError as exc:
            self._tolerate(exc, "dump schema", f"[{database}].[{schema}]")
            return

        self.listener.objects_found(self.target, database, schema, objects)
        for obj in objects:
            if self._stopped.is_set():
                return
            try:
                path = self._dump_object(database, schema, obj)
            except SfdumpError as exc:
                location = f"[{database}].[{schema}].[{obj.name}{obj.signature}]"
                self._tolerate(exc, "dump object", f"{location} ({obj.kind.value})")
                continue
            with self._lock:
                self.report.objects_written += 1
            self.listener.object_written(self.target, database, schema, obj, path)

        with self._lock:
            self.report.schemas += 1
        self.listener.schema_done(self.target, database, schema)

    def _dump_object(
        self, database: str, schema: str, obj: SchemaObjectDescriptor
    ) -> Path:
        ddl = fetch_definition(self.runner, database, schema, obj)
        path = self.paths.file_path(self.target.ddl_folder, database, schema, obj)
        self.paths.write(path, ddl)
        return path


def dump_target(
    target: Target,
    runner: QueryRunner,
    paths: PathAllocator,
    *,
    options: DumpOptions | None = None,
    listener: DumpListener | None = None,
) -> DumpReport:
    """
    Dump every database/schema/object of one target over an open connection.

    Args:
        target: Target being dumped (names the output folder).
        runner: Open connection shared by all tasks of the target.
        paths: Output path allocator.
        options: Parallelism and failure policy.
        listener: Progress listener.

    Returns:
        The report of the target. All spawned work has completed.

    Raises:
        SfdumpError: In fail-fast mode, the first error of any task.
    """
    options = options or DumpOptions()
    listener = listener or DumpListener()
    listener.target_started(target)
    report = _TargetDump(target, runner, paths, options, listener).run()
    listener.target_done(report)
    return report


def dump_targets(
    targets: list[Target],
    connect: Callable[[Target], ClosableRunner],
    paths: PathAllocator,
    *,
    options: DumpOptions | None = None,
    listener: DumpListener | None = None,
) -> list[DumpReport]:
    """
    Dump targets one after another, each over its own connection.

    The connection of a target is closed once its dump completes or fails.
    In best-effort mode a target that cannot be reached is reported as a
    failure and the next target is dumped.
    """
    options = options or DumpOptions()
    listener = listener or DumpListener()
    reports: list[DumpReport] = []

    for target in targets:
        try:
            runner = connect(target)
        except SfdumpError as exc:
            if options.fail_fast:
                raise
            failure = DumpFailure(
                target=target.name,
                operation="connect",
                location=f"[{target.name}]",
                error=str(exc),
            )
            listener.failure_recorded(failure)
            reports.append(DumpReport(target=target.name, failures=[failure]))
            continue

        try:
            reports.append(
                dump_target(target, runner, paths, options=options, listener=listener)
            )
        finally:
            runner.close()

    return reports
