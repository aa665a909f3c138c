"""Command for dumping target DDL to a file tree."""

from __future__ import annotations

import tempfile
import time
from pathlib import Path

from sfdump.cli.common.context import build_context
from sfdump.cli.common.exits import die, exit_from_exc, ok_exit, warn_exit
from sfdump.cli.common.options import (
    BestEffortOpt,
    ConfigOpt,
    InteractiveOpt,
    OutputOpt,
    ParallelOpt,
    TargetsOpt,
    VerboseOpt,
)
from sfdump.cli.common.output import out
from sfdump.cli.common.progress import DumpProgress
from sfdump.cli.tui import select_targets as tui_select_targets
from sfdump.core.auth import connect
from sfdump.core.config import select_targets
from sfdump.core.dump import DumpOptions, dump_targets
from sfdump.core.errors import ConfigError, SfdumpError
from sfdump.core.paths import PathAllocator

TEMP_FOLDER_PREFIX = "snowflake_dumper"


def _output_root(output: Path | None) -> Path:
    """Return the output root, creating a temporary one when not given."""
    if output is None:
        return Path(tempfile.mkdtemp(prefix=TEMP_FOLDER_PREFIX))
    try:
        output.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        exit_from_exc(exc, message=f"Cannot create output folder {output}: {exc}", code=1)
    return output.resolve()


def dump(
    config: str | None = ConfigOpt,
    target: list[str] = TargetsOpt,
    interactive: bool = InteractiveOpt,
    output: Path | None = OutputOpt,
    parallel: int = ParallelOpt,
    best_effort: bool = BestEffortOpt,
    verbose: bool = VerboseOpt,
):
    """
    Dump the DDL of every database, schema and object of the selected targets.
    """
    started = time.monotonic()

    try:
        options = DumpOptions(max_parallel=parallel, fail_fast=not best_effort)
    except ValueError as exc:
        die(f"Invalid --parallel: {exc}", code=2)

    appctx = build_context(config)
    out.info(
        f"{len(appctx.targets)} section(s) found in {appctx.config_path}: "
        f"{', '.join(t.name for t in appctx.targets)}"
    )

    if interactive:
        selected = tui_select_targets(appctx.targets)
    else:
        try:
            selected = select_targets(appctx.targets, target)
        except ConfigError as exc:
            die(str(exc), code=2)

    if not selected:
        warn_exit("No targets selected", code=0)

    root = _output_root(output)
    out.kv(
        {
            "Output root": root,
            "Targets": ", ".join(t.name for t in selected),
            "Parallel": options.max_parallel,
            "Mode": "fail-fast" if options.fail_fast else "best-effort",
        }
    )

    try:
        with DumpProgress(verbose=verbose) as progress:
            reports = dump_targets(
                selected,
                connect,
                PathAllocator(root),
                options=options,
                listener=progress,
            )
    except SfdumpError as exc:
        exit_from_exc(
            exc,
            message=f"Execution terminated: {exc}\nPartial output left in {root}",
            code=1,
        )

    out.reports_table(reports)
    failures = [f for r in reports for f in r.failures]
    if failures:
        out.failures_table(failures)

    out.header("Process completed, files are available here:")
    for report in reports:
        if report.ddl_folder:
            out.info(report.ddl_folder)
    out.info(f"Process completed, it took {time.monotonic() - started:.1f}s")

    if failures:
        die(f"{len(failures)} failure(s) recorded, see the table above", code=1)
    ok_exit(f"Dumped {sum(r.objects_written for r in reports)} object(s)")
