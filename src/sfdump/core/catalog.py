"""Catalog enumeration: databases, schemas and dumpable schema objects.

The functions here only issue read-only queries through a QueryRunner and
materialize rows into plain Python values. Traversal policy (which schemas to
skip, what to do with the results) belongs to the dump orchestrator.
"""

from __future__ import annotations

from typing import Protocol

from sfdump.core.errors import EnumerationError, QueryError
from sfdump.core.objects import SchemaObjectDescriptor

SYSTEM_SCHEMA = "INFORMATION_SCHEMA"

# Column holding the object name in SHOW DATABASES / SHOW SCHEMAS output.
_SHOW_NAME_COLUMN = 1

_OBJECTS_QUERY = """\
select TABLE_NAME, '' as ARGUMENT_SIGNATURE, 'TABLE' as OBJECT_TYPE
from {db}.INFORMATION_SCHEMA.TABLES
where TABLE_SCHEMA = {schema} and TABLE_TYPE = 'BASE TABLE'
union all
select TABLE_NAME, '', 'VIEW'
from {db}.INFORMATION_SCHEMA.VIEWS
where TABLE_SCHEMA = {schema}
union all
select FUNCTION_NAME, ARGUMENT_SIGNATURE, 'FUNCTION'
from {db}.INFORMATION_SCHEMA.FUNCTIONS
where FUNCTION_SCHEMA = {schema}
union all
select PROCEDURE_NAME, ARGUMENT_SIGNATURE, 'PROCEDURE'
from {db}.INFORMATION_SCHEMA.PROCEDURES
where PROCEDURE_SCHEMA = {schema}
union all
select SEQUENCE_NAME, '', 'SEQUENCE'
from {db}.INFORMATION_SCHEMA.SEQUENCES
where SEQUENCE_SCHEMA = {schema}
union all
select PIPE_NAME, '', 'PIPE'
from {db}.INFORMATION_SCHEMA.PIPES
where PIPE_SCHEMA = {schema}"""


class QueryRunner(Protocol):
    """Interface for running a query and returning its rows."""

    def query(self, text: str) -> list[tuple]:
        """Run a query and return all rows."""
        ...


def quote_identifier(name: str) -> str:
    """Return name as a double-quoted SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Return value as a single-quoted SQL string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "''") + "'"


def is_system_schema(schema: str) -> bool:
    """Return True for the reserved catalog schema (exact, case-sensitive)."""
    return schema == SYSTEM_SCHEMA


def build_objects_query(database: str, schema: str) -> str:
    """Return the union query listing all dumpable objects of a schema."""
    return _OBJECTS_QUERY.format(
        db=quote_identifier(database),
        schema=quote_literal(schema),
    )


def _names_from_show(
    runner: QueryRunner, text: str, *, operation: str, location: str
) -> list[str]:
    """Run a SHOW command and return the name column of every row."""
    try:
        rows = runner.query(text)
        return [str(row[_SHOW_NAME_COLUMN]) for row in rows]
    except (QueryError, IndexError, TypeError) as exc:
        raise EnumerationError(f"{operation} failed for {location}: {exc}") from exc


def list_databases(runner: QueryRunner) -> list[str]:
    """List all databases visible to the session."""
    return _names_from_show(
        runner,
        "show databases",
        operation="Listing databases",
        location="account",
    )


def list_schemas(runner: QueryRunner, database: str) -> list[str]:
    """List schemas in a database (including the system schema)."""
    return _names_from_show(
        runner,
        f"show schemas in database {quote_identifier(database)}",
        operation="Listing schemas",
        location=f"[{database}]",
    )


def list_objects(
    runner: QueryRunner, database: str, schema: str
) -> list[SchemaObjectDescriptor]:
    """
    List tables, views, functions, procedures, sequences and pipes in a schema.

    Names must come from a previous enumeration: they are interpolated into the
    query text, not bound. Callable signatures are normalized on the way out.
    Objects are returned in catalog order.
    """
    location = f"[{database}].[{schema}]"
    try:
        rows = runner.query(build_objects_query(database, schema))
        return [
            SchemaObjectDescriptor.from_row(name, kind, signature)
            for name, signature, kind in rows
        ]
    except (QueryError, TypeError, ValueError) as exc:
        raise EnumerationError(f"Listing objects failed for {location}: {exc}") from exc
