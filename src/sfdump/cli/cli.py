"""CLI application for dumping Snowflake DDL."""

import typer

from sfdump.cli.commands.catalog import catalog_app
from sfdump.cli.commands.dump import dump

app = typer.Typer(
    help="sfdump - dump Snowflake object DDL to a file tree",
    no_args_is_help=True,
)

app.command("dump")(dump)
app.add_typer(catalog_app, name="catalog")


if __name__ == "__main__":
    app()
