"""Commands for browsing the Snowflake catalog of a target."""

from __future__ import annotations

import re

import typer

from sfdump.cli.common.context import AppContext, build_context, connected
from sfdump.cli.common.exits import exit_from_exc
from sfdump.cli.common.options import (
    ConfigOpt,
    DatabaseOpt,
    KindOpt,
    NameOpt,
    SchemaOpt,
    TargetOpt,
)
from sfdump.cli.common.output import out
from sfdump.core.catalog import (
    is_system_schema,
    list_databases,
    list_objects,
    list_schemas,
)
from sfdump.core.errors import EnumerationError
from sfdump.core.objects import ObjectKind

catalog_app = typer.Typer(
    help="Browse databases, schemas and objects of a target.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@catalog_app.callback()
def _init(ctx: typer.Context, config: str | None = ConfigOpt):
    """Load the target configuration."""
    ctx.obj = build_context(config)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _compile_regex_or_exit(pattern: str | None, *, option_name: str) -> re.Pattern | None:
    """Compile a regex pattern and convert invalid syntax into CLI input errors."""
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        out.error(f"Invalid regex for {option_name}: {exc}")
        raise typer.Exit(2) from exc


def _parse_kind_or_exit(kind: str | None) -> ObjectKind | None:
    """Validate an object kind option (case-insensitive)."""
    if not kind:
        return None
    try:
        return ObjectKind(kind.upper())
    except ValueError as exc:
        valid = ", ".join(k.value for k in ObjectKind)
        out.error(f"Invalid --kind '{kind}'. Use one of: {valid}")
        raise typer.Exit(2) from exc


@catalog_app.command("targets-list")
def targets_list(ctx: typer.Context):
    """List configured targets."""
    appctx: AppContext = ctx.obj

    out.header("Targets")
    out.info(f"Config: {appctx.config_path} | Targets: {len(appctx.targets)}")
    out.targets_table(appctx.targets)


@catalog_app.command("databases-list")
def databases_list(
    ctx: typer.Context,
    target: str = TargetOpt,
    name: str | None = NameOpt,
):
    """List databases visible to a target."""
    appctx: AppContext = ctx.obj
    tgt = appctx.target(target)
    name_rx = _compile_regex_or_exit(name, option_name="--name")

    try:
        with connected(tgt) as adapter, out.status("Loading databases..."):
            databases = list_databases(adapter)
    except EnumerationError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    if name_rx:
        databases = [d for d in databases if name_rx.search(d)]

    if not databases:
        out.warn("No databases found.")
        raise typer.Exit(0)

    out.header("Databases")
    out.info(f"Target: {tgt.name} | Databases: {len(databases)}")
    out.names_table(databases, title="Databases", column="Database")


@catalog_app.command("schemas-list")
def schemas_list(
    ctx: typer.Context,
    target: str = TargetOpt,
    database: str = DatabaseOpt,
    name: str | None = NameOpt,
):
    """List schemas of a database (the system schema is marked)."""
    appctx: AppContext = ctx.obj
    tgt = appctx.target(target)
    name_rx = _compile_regex_or_exit(name, option_name="--name")

    try:
        with connected(tgt) as adapter, out.status("Loading schemas..."):
            schemas = list_schemas(adapter, database)
    except EnumerationError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    if name_rx:
        schemas = [s for s in schemas if name_rx.search(s)]

    if not schemas:
        out.warn("No schemas found.")
        raise typer.Exit(0)

    out.header("Schemas")
    out.info(f"Target: {tgt.name} | Database: {database} | Schemas: {len(schemas)}")
    out.names_table(
        [f"{s} (system, not dumped)" if is_system_schema(s) else s for s in schemas],
        title="Schemas",
        column="Schema",
    )


@catalog_app.command("objects-list")
def objects_list(
    ctx: typer.Context,
    target: str = TargetOpt,
    database: str = DatabaseOpt,
    schema: str = SchemaOpt,
    name: str | None = NameOpt,
    kind: str | None = KindOpt,
):
    """List dumpable objects of a schema with their normalized signatures."""
    appctx: AppContext = ctx.obj
    tgt = appctx.target(target)
    name_rx = _compile_regex_or_exit(name, option_name="--name")
    want_kind = _parse_kind_or_exit(kind)

    try:
        with connected(tgt) as adapter, out.status("Loading objects..."):
            objects = list_objects(adapter, database, schema)
    except EnumerationError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    if name_rx:
        objects = [o for o in objects if name_rx.search(o.name)]

    if want_kind:
        objects = [o for o in objects if o.kind == want_kind]

    if not objects:
        out.warn("No objects found.")
        raise typer.Exit(0)

    out.header("Objects")
    out.info(f"Schema: {database}.{schema} | Objects: {len(objects)}")
    out.objects_table(objects, title="Objects")
