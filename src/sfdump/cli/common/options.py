"""Common CLI options for the CLI."""

import typer

from sfdump.core.dump import DEFAULT_MAX_PARALLEL

ConfigOpt = typer.Option(
    None,
    "--config",
    "-c",
    help="INI file with one section per target (default: $SFDUMP_CONFIG or config.ini)",
)

TargetsOpt = typer.Option(
    [],
    "--target",
    "-t",
    help="Target (INI section) to dump. This is reusable; default is all targets.",
    show_default=False,
)

TargetOpt = typer.Option(
    ...,
    "--target",
    "-t",
    help="Target (INI section) to query",
)

InteractiveOpt = typer.Option(
    False,
    "--interactive",
    "-i",
    help="Pick the targets to dump from a checklist",
)

OutputOpt = typer.Option(
    None,
    "--output",
    "-o",
    help="Output root folder (default: a new temporary folder)",
)

ParallelOpt = typer.Option(
    DEFAULT_MAX_PARALLEL,
    "--parallel",
    "-n",
    help="Number of databases/schemas dumped in parallel",
)

BestEffortOpt = typer.Option(
    False,
    "--best-effort",
    help="Record failures and keep dumping instead of stopping at the first one",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Print every written file",
)

DatabaseOpt = typer.Option(..., "--database", "-d", help="Database name")

SchemaOpt = typer.Option(..., "--schema", "-s", help="Schema name")

NameOpt = typer.Option(
    None,
    "--name",
    help="Regex on names",
)

KindOpt = typer.Option(
    None,
    "--kind",
    "-k",
    help="Object kind (TABLE, VIEW, FUNCTION, PROCEDURE, SEQUENCE, PIPE)",
)
