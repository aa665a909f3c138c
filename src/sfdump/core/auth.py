"""Connection helpers for Snowflake.

This module centralizes creation of a Snowflake connection for a configured
target and converts connector failures into ConnectError with a short,
user-friendly message.
"""

import snowflake.connector
from snowflake.connector.errors import DatabaseError, Error as SnowflakeError

from sfdump.core.adapters.snowflake import SnowflakeAdapter
from sfdump.core.errors import ConnectError
from sfdump.core.objects import Target

# DB-API level at which threads may share a connection.
_SHARED_CONNECTION_THREADSAFETY = 2


def _format_connect_error(exc: Exception, target: Target) -> str:
    """Return a user-friendly connect error message."""
    where = f"[{target.name}] account {target.account} as {target.user}"
    errno = getattr(exc, "errno", None)
    if isinstance(exc, DatabaseError) and errno == 390100:
        return (
            f"Snowflake authentication failed for {where}.\n"
            "Check DBUSER/DBPASSWORD in the config file or the password "
            "environment override."
        )
    return f"Could not connect to {where}: {exc}"


def connection_is_shareable() -> bool:
    """Return True if the connector allows threads to share one connection."""
    level = getattr(snowflake.connector, "threadsafety", 0)
    return level >= _SHARED_CONNECTION_THREADSAFETY


def connect(target: Target) -> SnowflakeAdapter:
    """
    Open a Snowflake connection for a target and wrap it in an adapter.

    Queries are serialized behind a lock when the installed connector does not
    declare connections shareable between threads.
    """
    try:
        conn = snowflake.connector.connect(
            account=target.account,
            user=target.user,
            password=target.password,
            role=target.role,
            warehouse=target.warehouse,
            database=target.database,
            schema=target.schema,
        )
    except SnowflakeError as exc:
        raise ConnectError(_format_connect_error(exc, target)) from exc
    return SnowflakeAdapter(conn, serialize=not connection_is_shareable())
