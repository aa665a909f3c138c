"""Object definition retrieval through Snowflake's GET_DDL."""

from __future__ import annotations

from sfdump.core.catalog import QueryRunner, quote_identifier, quote_literal
from sfdump.core.errors import QueryError, RetrievalError
from sfdump.core.objects import SchemaObjectDescriptor


def qualified_name(database: str, schema: str, obj: SchemaObjectDescriptor) -> str:
    """Return `"DB"."SCHEMA"."NAME"` plus the normalized signature, if any."""
    parts = ".".join(quote_identifier(p) for p in (database, schema, obj.name))
    return parts + obj.signature


def build_ddl_query(database: str, schema: str, obj: SchemaObjectDescriptor) -> str:
    """Return the GET_DDL query for one object."""
    return (
        f"select get_ddl({quote_literal(obj.kind.value)}, "
        f"{quote_literal(qualified_name(database, schema, obj))}, true)"
    )


def fetch_definition(
    runner: QueryRunner, database: str, schema: str, obj: SchemaObjectDescriptor
) -> str:
    """
    Return the DDL of one object, verbatim.

    Raises:
        RetrievalError: If the query fails or returns no definition. An empty
            result is never returned as an empty string.
    """
    location = f"{obj.kind.value} {qualified_name(database, schema, obj)}"
    try:
        rows = runner.query(build_ddl_query(database, schema, obj))
    except QueryError as exc:
        raise RetrievalError(f"Fetching DDL failed for {location}: {exc}") from exc

    if not rows or not rows[0] or rows[0][0] is None:
        raise RetrievalError(f"Fetching DDL returned no definition for {location}")
    return str(rows[0][0])
